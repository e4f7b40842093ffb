"""Session middleware — signed cookie sessions.

Session data is serialized as JSON and signed with ``itsdangerous``.
The session dict lives in a ContextVar, accessible via ``get_session()``
from any handler or middleware running inside the request.
"""

from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from itsdangerous import BadData, URLSafeTimedSerializer

from perch.errors import ConfigurationError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next

_session_var: ContextVar[dict[str, Any] | None] = ContextVar("perch_session", default=None)


def get_session() -> dict[str, Any]:
    """Return the current session dict.

    Raises ``LookupError`` if called outside a request with
    ``SessionMiddleware`` active.
    """
    session = _session_var.get()
    if session is None:
        msg = (
            "No active session. Ensure SessionMiddleware is added "
            "to the app before accessing the session."
        )
        raise LookupError(msg)
    return session


def regenerate_session() -> dict[str, Any]:
    """Clear the session and return the (now empty) dict.

    Called by ``login()`` and ``logout()`` to prevent session fixation.
    """
    session = get_session()
    session.clear()
    return session


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session middleware configuration.

    ``secret_key`` is required; sessions are signed, not encrypted.
    """

    secret_key: str
    cookie_name: str = "perch_session"
    max_age: int = 86400  # 24 hours
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "lax"


class SessionMiddleware:
    """Signed cookie session middleware.

    Reads the session cookie, verifies the signature, exposes the dict
    through ``get_session()``, then signs it back into a Set-Cookie
    header on the response.

    Usage::

        app.add_middleware(SessionMiddleware(SessionConfig(secret_key="...")))
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: SessionConfig) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt="perch.session")

    def _load_session(self, request: Request) -> dict[str, Any]:
        cookie_value = request.cookies.get(self._config.cookie_name)
        if not cookie_value:
            return {}
        try:
            data = self._serializer.loads(cookie_value, max_age=self._config.max_age)
        except BadData:
            # Tampered or expired cookies start a fresh session
            return {}
        return data if isinstance(data, dict) else {}

    def _save_session(self, response: Response, session: dict[str, Any]) -> Response:
        cfg = self._config
        return response.with_cookie(
            name=cfg.cookie_name,
            value=self._serializer.dumps(session),
            max_age=cfg.max_age,
            path=cfg.path,
            domain=cfg.domain,
            secure=cfg.secure,
            httponly=cfg.httponly,
            samesite=cfg.samesite,
        )

    async def __call__(self, request: Request, next: Next) -> Response:
        """Load session, dispatch, then save session to response."""
        session = self._load_session(request)
        token = _session_var.set(session)
        try:
            response = await next(request)
        finally:
            _session_var.reset(token)
        # Re-sign even when unchanged so the expiry slides
        return self._save_session(response, session)
