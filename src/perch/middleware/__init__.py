"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Global middleware (``app.add_middleware``) wraps every request. Route
middleware (``middleware=(...)`` on a route or group) runs only for the
matched route, after global middleware.

Built-in middleware:
    SessionMiddleware -- Signed cookie sessions (itsdangerous)
    AuthMiddleware -- Attach the current user to the request
    Authenticate -- ``auth`` route guard
    EnsureVerified -- ``verified`` route guard
    PageVersionMiddleware -- Page-visit asset versioning
"""

from perch.middleware.auth import AuthConfig, AuthMiddleware
from perch.middleware.guards import Authenticate, EnsureVerified
from perch.middleware.pipeline import build_chain, resolve_middleware
from perch.middleware.protocol import Middleware, Next
from perch.middleware.sessions import SessionConfig, SessionMiddleware
from perch.middleware.versioning import PageVersionMiddleware

__all__ = [
    "AuthConfig",
    "AuthMiddleware",
    "Authenticate",
    "EnsureVerified",
    "Middleware",
    "Next",
    "PageVersionMiddleware",
    "SessionConfig",
    "SessionMiddleware",
    "build_chain",
    "resolve_middleware",
]
