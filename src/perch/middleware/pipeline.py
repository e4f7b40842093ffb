"""Middleware composition and alias resolution.

``build_chain`` wraps an endpoint in an ordered sequence of middleware
(first item outermost). ``resolve_middleware`` turns route middleware
references (callables or alias strings) into direct references once,
at freeze time, so no name lookup happens per request.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from perch.errors import ConfigurationError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next


def build_chain(middleware: Sequence[Callable[..., Any]], endpoint: Next) -> Next:
    """Compose *middleware* around *endpoint*.

    ``middleware[0]`` sees the request first and the response last.
    """
    handler = endpoint
    for mw in reversed(middleware):

        async def link(
            request: Request,
            _mw: Callable[..., Any] = mw,
            _next: Next = handler,
        ) -> Response:
            return await _mw(request, _next)

        handler = link
    return handler


def middleware_label(ref: Any) -> str:
    """Human-readable name for a middleware reference (CLI, logs)."""
    if isinstance(ref, str):
        return ref
    return getattr(ref, "__name__", type(ref).__name__)


def resolve_middleware(
    refs: Sequence[Any],
    aliases: Mapping[str, Callable[..., Any]],
    *,
    route: str = "",
) -> tuple[Callable[..., Any], ...]:
    """Resolve alias strings in *refs* to the registered middleware.

    Raises ``ConfigurationError`` for an unknown alias or a reference
    that is neither a string nor callable.
    """
    resolved: list[Callable[..., Any]] = []
    for ref in refs:
        if isinstance(ref, str):
            mw = aliases.get(ref)
            if mw is None:
                known = ", ".join(sorted(aliases)) or "none registered"
                msg = f"Unknown middleware alias {ref!r} on route {route!r} (known: {known})."
                raise ConfigurationError(msg)
            resolved.append(mw)
        elif callable(ref):
            resolved.append(ref)
        else:
            msg = f"Route {route!r} middleware must be a callable or alias, got {ref!r}."
            raise ConfigurationError(msg)
    return tuple(resolved)
