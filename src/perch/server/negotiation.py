"""Content negotiation — maps handler return values to Response objects.

isinstance-based dispatch, no magic, fully predictable.
"""

import json as json_module
from typing import Any

from perch.http.request import Request
from perch.http.response import Redirect, Response
from perch.pages.responder import PageResponder, json_default
from perch.pages.returns import PageRender


async def negotiate(
    value: Any,
    *,
    request: Request,
    pages: PageResponder | None = None,
) -> Response:
    """Convert a route handler's return value to a Response.

    Dispatch order:

    1. ``Response``         -> pass through
    2. ``Redirect``         -> status with Location header
    3. ``PageRender``       -> page responder (HTML or JSON page object)
    4. ``str``              -> 200, text/html
    5. ``bytes``            -> 200, application/octet-stream
    6. ``dict`` / ``list``  -> 200, application/json
    7. ``(value, int)``     -> negotiate value, override status
    8. ``(value, int, dict)`` -> negotiate value, override status + headers
    """
    match value:
        case Response():
            return value
        case Redirect():
            return (
                Response(status=value.status)
                .with_header("Location", value.url)
                .with_headers(dict(value.headers))
            )
        case PageRender():
            if pages is None:
                msg = "PageRender returned but the app has no page responder (is it frozen?)."
                raise RuntimeError(msg)
            return await pages.respond(value, request)
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=json_default),
                content_type="application/json",
            )
        case (inner, int() as status):
            response = await negotiate(inner, request=request, pages=pages)
            return response.with_status(status)
        case (inner, int() as status, dict() as headers):
            response = await negotiate(inner, request=request, pages=pages)
            return response.with_status(status).with_headers(headers)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return str, bytes, dict, list, render(...), Response, or Redirect."
            )
            raise TypeError(msg)
