"""Authentication middleware — attaches the current user to each request.

Resolves the user from a bearer token (API clients) or the session
(browsers) and passes the request on with ``request.user`` set. The
user is also stored in a ContextVar so handlers can call ``get_user()``.

This middleware never rejects a request. Rejection is the job of the
``auth`` and ``verified`` route guards (see ``perch.middleware.guards``).

Usage::

    app.add_middleware(SessionMiddleware(SessionConfig(secret_key="...")))
    app.add_middleware(AuthMiddleware(AuthConfig(load_user=users.get)))
"""

from collections.abc import Awaitable, Callable
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, runtime_checkable

from perch._internal.invoke import invoke
from perch.errors import ConfigurationError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next
from perch.security.audit import emit_security_event


@runtime_checkable
class User(Protocol):
    """Minimal user protocol.

    Any object with ``id`` and ``is_authenticated`` satisfies this.
    Applications bring their own user model.
    """

    @property
    def id(self) -> str: ...

    @property
    def is_authenticated(self) -> bool: ...


@dataclass(frozen=True, slots=True)
class AnonymousUser:
    """Sentinel for unauthenticated requests, so ``get_user()`` never returns ``None``."""

    id: str = ""
    is_authenticated: bool = False
    is_verified: bool = False


ANONYMOUS = AnonymousUser()

_user_var: ContextVar[Any] = ContextVar("perch_user")
_active_config: ContextVar[AuthConfig | None] = ContextVar("perch_auth_config", default=None)


def get_user() -> Any:
    """Return the current user (or ``AnonymousUser``).

    Raises ``LookupError`` outside a request with ``AuthMiddleware`` active.
    """
    try:
        return _user_var.get()
    except LookupError:
        msg = "No auth context. Ensure AuthMiddleware is added to the app before accessing the user."
        raise LookupError(msg) from None


def current_user() -> Any:
    """Like ``get_user()`` but returns ``AnonymousUser`` instead of raising."""
    return _user_var.get(ANONYMOUS)


def is_authenticated(user: Any) -> bool:
    return user is not None and bool(getattr(user, "is_authenticated", False))


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """Authentication middleware configuration.

    Attributes:
        load_user: Callback loading a user by ID from the session (sync or async).
        verify_token: Callback resolving a bearer token to a user (sync or async).
        session_key: Session dict key holding the user ID.
        token_header: HTTP header carrying bearer tokens.
        token_scheme: Expected scheme prefix.
    """

    load_user: Callable[[str], Any | Awaitable[Any]] | None = None
    verify_token: Callable[[str], Any | Awaitable[Any]] | None = None
    session_key: str = "user_id"
    token_header: str = "Authorization"
    token_scheme: str = "Bearer"


def login(user: Any) -> None:
    """Log in *user*: rotate the session, store the user ID, update the ContextVar.

    Requires ``SessionMiddleware`` and ``AuthMiddleware``.
    """
    from perch.middleware.sessions import regenerate_session

    config = _active_config.get()
    if config is None:
        msg = "login() requires AuthMiddleware to be active."
        raise LookupError(msg)

    session = regenerate_session()
    session[config.session_key] = str(user.id)
    _user_var.set(user)
    emit_security_event("auth.login.success", user_id=str(user.id))


def logout() -> None:
    """Log out: discard the session and reset the ContextVar to anonymous."""
    from perch.middleware.sessions import regenerate_session

    if _active_config.get() is None:
        msg = "logout() requires AuthMiddleware to be active."
        raise LookupError(msg)

    user_id = getattr(current_user(), "id", "") or None
    regenerate_session()
    _user_var.set(ANONYMOUS)
    emit_security_event("auth.logout.success", user_id=user_id)


class AuthMiddleware:
    """Resolve the request's user: token first, then session.

    Middleware ordering::

        app.add_middleware(SessionMiddleware(...))  # 1st: sessions
        app.add_middleware(AuthMiddleware(...))      # 2nd: auth
    """

    __slots__ = ("_config",)

    # Picked up by App.freeze() and exposed to the root view template
    template_globals: ClassVar[dict[str, Any]] = {"current_user": current_user}

    def __init__(self, config: AuthConfig | None = None) -> None:
        self._config = config or AuthConfig()
        if self._config.load_user is None and self._config.verify_token is None:
            msg = (
                "AuthConfig requires at least one of 'load_user' (session auth) "
                "or 'verify_token' (token auth) to be set."
            )
            raise ConfigurationError(msg)

    def _extract_token(self, request: Request) -> str | None:
        header = request.headers.get(self._config.token_header)
        prefix = f"{self._config.token_scheme} "
        if header is None or not header.startswith(prefix):
            return None
        return header[len(prefix) :].strip() or None

    async def _authenticate_token(self, request: Request) -> Any:
        token = self._extract_token(request)
        if token is None or self._config.verify_token is None:
            return None
        user = await invoke(self._config.verify_token, token)
        if user is None:
            emit_security_event("auth.token.invalid", request=request)
        return user

    async def _authenticate_session(self) -> Any:
        if self._config.load_user is None:
            return None

        from perch.middleware.sessions import get_session

        try:
            session = get_session()
        except LookupError:
            msg = (
                "AuthMiddleware session auth requires SessionMiddleware. "
                "Add SessionMiddleware before AuthMiddleware, or use token auth only."
            )
            raise ConfigurationError(msg) from None

        user_id = session.get(self._config.session_key)
        if not user_id:
            return None
        return await invoke(self._config.load_user, str(user_id))

    async def __call__(self, request: Request, next: Next) -> Response:
        user = await self._authenticate_token(request)
        if user is None:
            user = await self._authenticate_session()

        resolved = user if user is not None else ANONYMOUS
        user_token = _user_var.set(resolved)
        config_token = _active_config.set(self._config)
        try:
            return await next(request.with_user(user))
        finally:
            _user_var.reset(user_token)
            _active_config.reset(config_token)
