"""Page responder — PageRender to Response.

Two shapes, chosen per request:

- Page visit (``X-Inertia: true``): JSON page object
  ``{"component", "props", "url", "version"}`` with ``X-Inertia: true``.
- First load: the root view template rendered by kida, with the same
  page object embedded in ``<div id="app" data-page="...">``.

Props are resolved at response time. Zero-argument callables are called
(sync or async); ``lazy()`` props are skipped unless a partial reload
names them in ``X-Inertia-Partial-Data``.
"""

import dataclasses
import json as json_module
from collections.abc import Mapping
from typing import Any

from kida import Environment

from perch._internal.invoke import invoke
from perch.http.request import Request
from perch.http.response import Response
from perch.pages.returns import Lazy, PageRender


def json_default(value: Any) -> Any:
    """``json.dumps`` fallback: dataclasses become dicts, everything else ``str``."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


def dump_page(page: Mapping[str, Any]) -> str:
    return json_module.dumps(page, default=json_default, separators=(",", ":"))


def _partial_keys(page: PageRender, request: Request) -> frozenset[str] | None:
    """Keys requested by a partial reload of this component, else ``None``."""
    if not request.is_page_visit:
        return None
    if request.headers.get("x-inertia-partial-component") != page.component:
        return None
    raw = request.headers.get("x-inertia-partial-data", "")
    keys = frozenset(k.strip() for k in raw.split(",") if k.strip())
    return keys or None


async def resolve_props(
    props: Mapping[str, Any],
    only: frozenset[str] | None = None,
) -> dict[str, Any]:
    """Evaluate callable and lazy props.

    With *only*, keep just those keys (lazy ones included); otherwise
    keep everything except lazy props.
    """
    resolved: dict[str, Any] = {}
    for key, value in props.items():
        if only is not None:
            if key not in only:
                continue
        elif isinstance(value, Lazy):
            continue

        if isinstance(value, Lazy):
            value = await invoke(value.factory)
        elif callable(value):
            value = await invoke(value)
        resolved[key] = value
    return resolved


class PageResponder:
    """Turns ``PageRender`` values into responses for one app.

    Created once at freeze time with the app's kida environment, root
    view name, asset version and shared props.
    """

    __slots__ = ("_env", "_root_view", "_shared", "_title", "version")

    def __init__(
        self,
        env: Environment,
        *,
        root_view: str = "app.html",
        version: str | None = None,
        shared: Mapping[str, Any] | None = None,
        title: str = "",
    ) -> None:
        self._env = env
        self._root_view = root_view
        self._shared = dict(shared or {})
        self._title = title
        self.version = version

    async def page_object(self, page: PageRender, request: Request) -> dict[str, Any]:
        """Build the page object sent to the client."""
        only = _partial_keys(page, request)
        # Page props win over shared props with the same key
        props = await resolve_props({**self._shared, **page.props}, only)
        return {
            "component": page.component,
            "props": props,
            "url": request.url,
            "version": self.version,
        }

    async def respond(self, page: PageRender, request: Request) -> Response:
        page_obj = await self.page_object(page, request)

        if request.is_page_visit:
            return Response(
                body=dump_page(page_obj),
                content_type="application/json",
                headers=(("Vary", "X-Inertia"), ("X-Inertia", "true")),
            )

        template = self._env.get_template(self._root_view)
        html = template.render({"page": page_obj, "title": self._title})
        return Response(body=html, headers=(("Vary", "X-Inertia"),))
