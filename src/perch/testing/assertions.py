"""Page and redirect assertion helpers for perch tests.

Each assertion produces a clear error message on failure.
"""

import html
import json as json_module
import re
from typing import Any

from perch.http.response import Response

_DATA_PAGE = re.compile(r'data-page="([^"]*)"')


def page_object(response: Response) -> dict[str, Any]:
    """Extract the page object from a page-visit JSON or a full HTML response."""
    if response.content_type.startswith("application/json"):
        return json_module.loads(response.text)
    found = _DATA_PAGE.search(response.text)
    assert found is not None, (
        "Response carries no page object (no JSON body, no data-page attribute).\n"
        f"Response body: {response.text[:500]}"
    )
    return json_module.loads(html.unescape(found.group(1)))


def assert_page(
    response: Response,
    component: str,
    props: dict[str, Any] | None = None,
    *,
    status: int = 200,
) -> dict[str, Any]:
    """Assert *response* renders *component*; optionally check exact props.

    Returns the page object for further inspection.
    """
    assert response.status == status, (
        f"Expected status {status}, got {response.status}.\n"
        f"Response body: {response.text[:500]}"
    )
    page = page_object(response)
    assert page["component"] == component, (
        f"Expected component {component!r}, got {page['component']!r}"
    )
    if props is not None:
        assert page["props"] == props, f"Expected props {props!r}, got {page['props']!r}"
    return page


def assert_redirect(response: Response, url: str | None = None, *, status: int = 302) -> str:
    """Assert *response* redirects (``Location``), optionally to a URL prefix.

    Returns the ``Location`` value.
    """
    assert response.status == status, f"Expected status {status}, got {response.status}"
    location = response.header("location")
    assert location is not None, "Redirect response has no Location header"
    if url is not None:
        assert location.startswith(url), f"Expected redirect to {url!r}, got {location!r}"
    return location
