"""ASGI handler — translates ASGI scope/messages to perch types.

The only component that touches raw ASGI for HTTP. Converts the scope
to a Request, runs global middleware, matches the route, runs the
route's middleware, calls the handler, and sends the Response back.

Each call is independent: the only shared state is the frozen router,
middleware tuples and page responder, none of which change after freeze.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from contextvars import Token
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch.context import request_var
from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.pipeline import build_chain
from perch.pages.responder import PageResponder
from perch.routing.route import Route
from perch.routing.router import Router
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.negotiation import negotiate
from perch.server.sender import send_response

logger = logging.getLogger("perch.server")


async def dispatch(
    request: Request,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...] = (),
    error_handlers: Mapping[int | type, Callable[..., Any]] | None = None,
    pages: PageResponder | None = None,
    debug: bool = False,
) -> Response:
    """Turn one Request into one Response.

    1. Global middleware wraps everything below.
    2. Route lookup; a miss raises ``NotFound`` / ``MethodNotAllowed``.
    3. The route's middleware runs in attachment order; any of them may
       short-circuit with its own Response.
    4. The handler runs and its return value is negotiated.

    HTTP errors and unexpected exceptions become error responses.
    """
    error_handlers = error_handlers or {}

    async def route_endpoint(req: Request) -> Response:
        match = router.match(req.method, req.path)
        route = match.route
        logger.debug("%s %s -> %s", req.method, req.path, route.name or route.path)
        req = req.with_path_params(match.path_params)

        async def call_handler(final: Request) -> Response:
            return await _invoke_handler(route, final, pages=pages)

        return await build_chain(route.middleware, call_handler)(req)

    try:
        return await build_chain(middleware, route_endpoint)(request)
    except HTTPError as exc:
        return await handle_http_error(exc, request, error_handlers, pages, debug)
    except Exception as exc:
        return await handle_internal_error(exc, request, error_handlers, pages, debug)


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    **options: Any,
) -> None:
    """Process a single HTTP request through the full pipeline.

    *options* are forwarded to ``dispatch``.
    """
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    token: Token[Request] = request_var.set(request)
    try:
        response = await dispatch(request, **options)
    finally:
        request_var.reset(token)

    await send_response(response, send, head=request.method == "HEAD")


async def _invoke_handler(
    route: Route,
    request: Request,
    *,
    pages: PageResponder | None,
) -> Response:
    """Call the matched route handler and negotiate its return value."""
    kwargs = _build_handler_kwargs(route.handler, request)
    result = await invoke(route.handler, **kwargs)
    return await negotiate(result, request=request, pages=pages)


def _build_handler_kwargs(handler: Callable[..., Any], request: Request) -> dict[str, Any]:
    """Inspect the handler signature and build kwargs.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. ``user`` parameter -> ``request.user``
    3. Path parameters (by name, converted to the annotated type)
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name == "user":
            kwargs[name] = request.user
        elif name in request.path_params:
            value = request.path_params[name]
            if param.annotation in (int, float):
                try:
                    kwargs[name] = param.annotation(value)
                except ValueError:
                    kwargs[name] = value
            else:
                kwargs[name] = value

    return kwargs
