"""Route groups — batches of routes registered outside the app module.

A group collects routes with the same decorators as ``App`` and is
folded into the app's table with ``app.include(group)``. The group's
prefix, name prefix and middleware apply to every route in it.

Usage::

    settings = RouteGroup(prefix="settings", middleware=("auth",), name_prefix="settings.")

    @settings.get("profile", name="profile")
    def profile():
        return render("settings/Profile")

    app.include(settings)   # GET /settings/profile, named "settings.profile"
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from perch._internal.types import Handler

# A middleware callable, or the name of one registered with app.alias_middleware()
type MiddlewareRef = str | Callable[..., Any]


@dataclass(frozen=True, slots=True)
class PendingRoute:
    """A route waiting to be resolved and compiled."""

    path: str
    handler: Handler
    methods: tuple[str, ...]
    name: str | None = None
    middleware: tuple[MiddlewareRef, ...] = ()


def join_paths(prefix: str, path: str) -> str:
    """Join a group prefix and a route path into a single ``/``-rooted path."""
    parts = [p for p in (prefix.strip("/"), path.strip("/")) if p]
    return "/" + "/".join(parts)


class RouteRegistrar:
    """Shared ``route()`` / ``get()`` / ``post()`` decorators.

    Subclasses decide where a registered route goes by implementing
    ``_register``.
    """

    __slots__ = ()

    def _register(self, pending: PendingRoute) -> None:
        raise NotImplementedError

    def route(
        self,
        path: str,
        *,
        methods: Sequence[str] | None = None,
        name: str | None = None,
        middleware: Sequence[MiddlewareRef] = (),
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``{param}`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Optional unique route name for ``url_for``.
            middleware: Route middleware, run in order before the handler.
                Strings are aliases resolved when the app freezes.
        """

        def decorator(func: Handler) -> Handler:
            self._register(
                PendingRoute(
                    path=path,
                    handler=func,
                    methods=tuple(m.upper() for m in (methods or ("GET",))),
                    name=name,
                    middleware=tuple(middleware),
                )
            )
            return func

        return decorator

    def get(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("GET",), **kwargs)

    def post(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("POST",), **kwargs)

    def put(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("PUT",), **kwargs)

    def patch(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("PATCH",), **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("DELETE",), **kwargs)


class RouteGroup(RouteRegistrar):
    """An ordered batch of routes sharing a prefix, name prefix and middleware."""

    __slots__ = ("_routes", "middleware", "name_prefix", "prefix")

    def __init__(
        self,
        prefix: str = "",
        *,
        middleware: Sequence[MiddlewareRef] = (),
        name_prefix: str = "",
    ) -> None:
        self.prefix = prefix
        self.middleware: tuple[MiddlewareRef, ...] = tuple(middleware)
        self.name_prefix = name_prefix
        self._routes: list[PendingRoute] = []

    def _register(self, pending: PendingRoute) -> None:
        self._routes.append(pending)

    def include(self, group: RouteGroup) -> None:
        """Nest another group inside this one."""
        self._routes.extend(group.pending_routes())

    def pending_routes(self) -> list[PendingRoute]:
        """Routes with this group's prefix, name prefix and middleware applied."""
        return [
            PendingRoute(
                path=join_paths(self.prefix, pending.path),
                handler=pending.handler,
                methods=pending.methods,
                name=f"{self.name_prefix}{pending.name}" if pending.name else None,
                middleware=(*self.middleware, *pending.middleware),
            )
            for pending in self._routes
        ]

    def __len__(self) -> int:
        return len(self._routes)
