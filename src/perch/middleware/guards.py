"""Route guards — the ``auth`` and ``verified`` route middleware.

Guards fail closed: when the check does not pass they return a
terminal response (redirect, 401, 403 or a page-visit 409) and the
handler never runs. They never raise.

Response by client kind:

- API clients (``Authorization`` header, or JSON preferred over HTML)
  get a JSON error with status 401 / 403.
- Page visits (``X-Inertia: true``) get ``409`` plus
  ``X-Inertia-Location`` so the client performs a full navigation.
- Browsers get a ``302`` redirect.

Usage::

    app.alias_middleware("auth", Authenticate(login_url="/login"))
    app.alias_middleware("verified", EnsureVerified(notice_url="/verify-email"))

    @app.get("dashboard", middleware=("auth", "verified"))
    def dashboard():
        return render("Dashboard")
"""

import json as json_module
from urllib.parse import quote

from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.auth import is_authenticated
from perch.middleware.protocol import Next
from perch.security.audit import emit_security_event


def _json_error(status: int, message: str) -> Response:
    return Response(
        body=json_module.dumps({"message": message}),
        status=status,
        content_type="application/json",
    )


def _navigate(request: Request, url: str) -> Response:
    """Send the client to *url*: 409 for page visits, 302 otherwise."""
    if request.is_page_visit:
        return Response(status=409).with_header("X-Inertia-Location", url)
    return Response(status=302).with_header("Location", url)


def is_verified(user: object) -> bool:
    """True if *user* has a truthy ``is_verified`` or ``email_verified_at``."""
    if getattr(user, "is_verified", False):
        return True
    return bool(getattr(user, "email_verified_at", None))


class Authenticate:
    """Short-circuit unless ``request.user`` is authenticated."""

    __slots__ = ("login_url",)

    def __init__(self, login_url: str = "/login") -> None:
        self.login_url = login_url

    def redirect_url(self, request: Request) -> str:
        separator = "&" if "?" in self.login_url else "?"
        return f"{self.login_url}{separator}next={quote(request.url, safe='')}"

    async def __call__(self, request: Request, next: Next) -> Response:
        if is_authenticated(request.user):
            return await next(request)

        emit_security_event("auth.require.unauthenticated", request=request)
        if request.wants_json:
            return _json_error(401, "Unauthenticated.")
        return _navigate(request, self.redirect_url(request))


class EnsureVerified:
    """Short-circuit unless the request's user has a verified email.

    Must run after ``Authenticate``; an anonymous request is treated as
    unverified.
    """

    __slots__ = ("notice_url",)

    def __init__(self, notice_url: str = "/verify-email") -> None:
        self.notice_url = notice_url

    async def __call__(self, request: Request, next: Next) -> Response:
        user = request.user
        if is_authenticated(user) and is_verified(user):
            return await next(request)

        emit_security_event(
            "auth.require.unverified",
            request=request,
            user_id=getattr(user, "id", None),
        )
        if request.wants_json:
            return _json_error(403, "Your email address is not verified.")
        return _navigate(request, self.notice_url)
