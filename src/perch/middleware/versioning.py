"""Page-visit protocol middleware — asset versioning and redirect upgrades.

- A GET page visit whose ``X-Inertia-Version`` differs from the app's
  asset version gets ``409 Conflict`` with ``X-Inertia-Location``,
  telling the client to do a full reload and pick up new assets.
- A 302 answering a PUT/PATCH/DELETE page visit becomes 303, so the
  client follows it with GET.
"""

from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next

_REWRITE_METHODS = frozenset({"PUT", "PATCH", "DELETE"})


class PageVersionMiddleware:
    """Enforce the page-visit asset version for one app."""

    __slots__ = ("version",)

    def __init__(self, version: str | None) -> None:
        self.version = version

    async def __call__(self, request: Request, next: Next) -> Response:
        if not request.is_page_visit:
            return await next(request)

        if request.method == "GET" and self.version is not None:
            client_version = request.headers.get("x-inertia-version", "")
            if client_version != self.version:
                return Response(status=409).with_header("X-Inertia-Location", request.url)

        response = await next(request)
        if response.status == 302 and request.method in _REWRITE_METHODS:
            return response.with_status(303)
        return response
