"""Perch application class.

Mutable during setup (route registration, middleware, aliases, shared
props). Frozen on the first request, at lifespan startup, or by an
explicit ``app.freeze()``; after that the route table, middleware and
page responder never change.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch._internal.types import ErrorHandler
from perch.config import AppConfig
from perch.errors import DuplicateRouteName
from perch.middleware.guards import Authenticate, EnsureVerified
from perch.middleware.pipeline import middleware_label, resolve_middleware
from perch.middleware.protocol import Middleware
from perch.middleware.versioning import PageVersionMiddleware
from perch.pages.responder import PageResponder
from perch.routing.group import PendingRoute, RouteGroup, RouteRegistrar
from perch.routing.route import Route
from perch.routing.router import Router
from perch.server.handler import handle_request
from perch.templating.integration import create_environment

logger = logging.getLogger("perch.app")


class App(RouteRegistrar):
    """The perch application.

    Usage::

        app = App(AppConfig(secret_key="..."))

        @app.get("/health")
        def health():
            return Response("OK", content_type="text/plain")

        @app.get("dashboard", name="dashboard", middleware=("auth", "verified"))
        def dashboard():
            return render("Dashboard")

        app.include(settings_routes)

    Thread safety:
        Setup is single-threaded (decorators at import time). The freeze
        transition uses a Lock + double-check so exactly one thread
        compiles the app, even when several workers receive their first
        request at once.
    """

    __slots__ = (
        "_aliases",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_middleware_list",
        "_pages",
        "_pending_routes",
        "_route_names",
        # Compiled state (populated by freeze)
        "_router",
        "_shared_props",
        "_shutdown_hooks",
        "_startup_hooks",
        "_template_globals",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_routes: list[PendingRoute] = []
        self._route_names: dict[str, str] = {}
        self._middleware_list: list[Middleware] = []
        self._aliases: dict[str, Callable[..., Any]] = {
            "auth": Authenticate(login_url=self.config.login_url),
            "verified": EnsureVerified(notice_url=self.config.verification_url),
        }
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._shared_props: dict[str, Any] = {}
        self._template_globals: dict[str, Any] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state — set during freeze()
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._pages: PageResponder | None = None

    # -- Route registration --

    def _register(self, pending: PendingRoute) -> None:
        """Queue a route; route names are checked for uniqueness right away."""
        self._check_not_frozen()
        if pending.name is not None:
            existing = self._route_names.get(pending.name)
            if existing is not None:
                raise DuplicateRouteName(pending.name, existing, pending.path)
            self._route_names[pending.name] = pending.path
        self._pending_routes.append(pending)

    def include(self, group: RouteGroup) -> None:
        """Append every route of *group* to this app's table, in order."""
        for pending in group.pending_routes():
            self._register(pending)

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a global middleware. Global middleware runs in the order added."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    def alias_middleware(self, name: str, middleware: Middleware) -> None:
        """Register (or replace) route middleware under *name*.

        ``auth`` and ``verified`` are registered by default.
        """
        self._check_not_frozen()
        self._aliases[name] = middleware

    # -- Pages --

    def share(self, key: str, value: Any) -> None:
        """Share a prop with every page render.

        *value* may be a zero-argument callable, evaluated per response::

            app.share("auth", lambda: {"user": current_user()})
        """
        self._check_not_frozen()
        self._shared_props[key] = value

    def template_global(self, name: str, value: Any) -> None:
        """Expose *value* to the root view template."""
        self._check_not_frozen()
        self._template_globals[name] = value

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook, run during ASGI lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook, run during ASGI lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Introspection --

    @property
    def router(self) -> Router:
        """The compiled router. Freezes the app on first access."""
        self.freeze()
        assert self._router is not None
        return self._router

    def url_for(self, name: str, /, **params: object) -> str:
        """Path for the route registered as *name*."""
        return self.router.url_for(name, **params)

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Compile the app and serve it with pounce."""
        from perch.server.serve import configure_logging, run_server

        configure_logging(self.config.log_level)
        self.freeze()
        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            workers=self.config.workers,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self.freeze()

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            pages=self._pages,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app before the server accepts requests, so a bad
        route table (unknown alias, duplicate name) aborts startup.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self.freeze()
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                try:
                    await self.shutdown()
                except Exception as exc:
                    logger.exception("Shutdown failed")
                    await send({"type": "lifespan.shutdown.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def startup(self) -> None:
        """Run startup hooks in registration order."""
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        """Run shutdown hooks in registration order."""
        for hook in self._shutdown_hooks:
            await invoke(hook)

    # -- Freeze --

    def freeze(self) -> None:
        """Compile the route table, resolve middleware, build the page responder.

        Idempotent and thread-safe. Raises ``ConfigurationError`` for an
        unknown middleware alias, before any request is served.
        """
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._compile()
            self._frozen = True

    def _compile(self) -> None:
        router = Router()
        for pending in self._pending_routes:
            middleware = resolve_middleware(pending.middleware, self._aliases, route=pending.path)
            router.add(
                Route(
                    path=pending.path,
                    handler=pending.handler,
                    methods=frozenset(pending.methods),
                    name=pending.name,
                    middleware=middleware,
                    middleware_names=tuple(middleware_label(m) for m in pending.middleware),
                )
            )
        router.compile()

        # Middleware may expose template globals (e.g. AuthMiddleware -> current_user)
        for mw in self._middleware_list:
            for name, value in getattr(mw, "template_globals", {}).items():
                self._template_globals.setdefault(name, value)

        env = create_environment(self.config, globals_=self._template_globals)
        self._pages = PageResponder(
            env,
            root_view=self.config.root_view,
            version=self.config.asset_version,
            shared=self._shared_props,
            title=self.config.title,
        )
        self._middleware = (
            *self._middleware_list,
            PageVersionMiddleware(self.config.asset_version),
        )
        self._router = router
        logger.info(
            "Compiled %d routes, %d global middleware",
            len(router.routes),
            len(self._middleware_list),
        )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware, and aliases before the first request."
            )
            raise RuntimeError(msg)
