"""Immutable HTTP request.

Frozen metadata with async body access. Middleware that needs to add
information (the authenticated user, matched path params) derives a
new request with ``with_user()`` / ``with_path_params()`` instead of
mutating the one it was given.
"""

from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from perch._internal.asgi import Receive, Scope
from perch.http.cookies import parse_cookies
from perch.http.headers import Headers
from perch.http.params import FormData, QueryParams


async def _empty_receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``user`` is the authenticated-user context. It stays ``None`` until
    an auth middleware attaches one.
    """

    method: str
    path: str
    headers: Headers = field(default_factory=Headers)
    query: QueryParams = field(default_factory=QueryParams)
    path_params: Mapping[str, str] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)
    client: tuple[str, int] | None = None
    user: Any = None

    _receive: Receive = field(default=_empty_receive, repr=False, compare=False)

    # Body and parsed form are read once; the dict is shared by derived requests
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Derived requests --

    def with_user(self, user: Any) -> Request:
        """Return a copy of this request carrying *user*."""
        return replace(self, user=user)

    def with_path_params(self, path_params: Mapping[str, str]) -> Request:
        return replace(self, path_params=dict(path_params))

    # -- Computed properties --

    @property
    def is_page_visit(self) -> bool:
        """True when the client-side router asked for a JSON page object."""
        return self.headers.get("x-inertia") == "true"

    @property
    def wants_json(self) -> bool:
        """True for API clients: an ``Authorization`` header, or JSON preferred over HTML."""
        if self.headers.get("authorization"):
            return True
        accept = self.headers.get("accept", "")
        return "application/json" in accept and "text/html" not in accept

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string, as the client sent it."""
        raw = self._cache.get("_query_string", b"")
        if raw:
            return f"{self.path}?{raw.decode('latin-1')}"
        return self.path

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body. Cached after the first call."""
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        import json as json_module

        return json_module.loads(await self.body())

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    async def form(self) -> FormData:
        """Parse a URL-encoded body.

        Raises:
            ValueError: If the Content-Type is present and not URL-encoded.
        """
        if "_form" in self._cache:
            return self._cache["_form"]
        ct = (self.content_type or "application/x-www-form-urlencoded").split(";")[0]
        if ct.strip().lower() != "application/x-www-form-urlencoded":
            msg = f"Unsupported form content type: {ct!r}"
            raise ValueError(msg)
        result = FormData.parse((await self.body()).decode("utf-8"))
        self._cache["_form"] = result
        return result

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = Headers(tuple(scope.get("headers", ())))
        query_string = scope.get("query_string", b"")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=headers,
            query=QueryParams.parse(query_string),
            cookies=parse_cookies(headers.get("cookie", "")),
            client=tuple(client) if client else None,
            _receive=receive,
            _cache={"_query_string": query_string},
        )
