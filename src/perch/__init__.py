"""Perch — request routing and page rendering for server-rendered apps.

Handlers return a raw response or ``render("Component", props)``;
perch delivers the page as a full HTML document or as a JSON page
object for the client-side router.

Basic usage::

    from perch import App, Response, render

    app = App()

    @app.get("/health")
    def health():
        return Response("OK", content_type="text/plain")

    @app.get("/", name="home")
    def home():
        return render("Welcome")

    @app.get("dashboard", name="dashboard", middleware=("auth", "verified"))
    def dashboard():
        return render("Dashboard")

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "DuplicateRouteName",
    "HTTPError",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "PageRender",
    "PerchError",
    "Redirect",
    "Request",
    "Response",
    "RouteGroup",
    "get_request",
    "lazy",
    "render",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "AppConfig":
        from perch.config import AppConfig

        return AppConfig

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from perch.http import response as _resp

        return getattr(_resp, name)

    if name in ("PageRender", "lazy", "render"):
        from perch.pages import returns as _pages

        return getattr(_pages, name)

    if name == "RouteGroup":
        from perch.routing.group import RouteGroup

        return RouteGroup

    if name in ("Middleware", "Next"):
        from perch.middleware import protocol as _mw

        return getattr(_mw, name)

    if name == "get_request":
        from perch.context import get_request

        return get_request

    if name in (
        "ConfigurationError",
        "DuplicateRouteName",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "PerchError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
