"""Error handling pipeline for perch requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using registered error handlers or plain-text defaults. A raw
traceback only reaches the client when ``debug`` is on.
"""

import inspect
import logging
import traceback
from collections.abc import Callable, Mapping
from typing import Any

from perch._internal.invoke import invoke
from perch.errors import HTTPError
from perch.http.request import Request
from perch.http.response import Response
from perch.pages.responder import PageResponder
from perch.server.negotiation import negotiate

logger = logging.getLogger("perch.server")


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    pages: PageResponder | None,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    """
    params = list(inspect.signature(handler).parameters.values())
    args = (request, exc)[: len(params)]
    result = await invoke(handler, *args)
    return await negotiate(result, request=request, pages=pages)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: Mapping[int | type, Callable[..., Any]],
    pages: PageResponder | None,
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, pages)
        # Keep the error status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        for name, value in exc.headers:
            if response.header(name) is None:
                response = response.with_header(name, value)
        return response

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"
    response = Response(body=detail, status=exc.status, content_type="text/plain; charset=utf-8")
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: Mapping[int | type, Callable[..., Any]],
    pages: PageResponder | None,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        try:
            response = await call_error_handler(handler, request, exc, pages)
        except Exception:
            logger.exception("Error handler for %s failed", type(exc).__name__)
        else:
            return response if response.status != 200 else response.with_status(500)

    body = "".join(traceback.format_exception(exc)) if debug else "Internal Server Error"
    return Response(body=body, status=500, content_type="text/plain; charset=utf-8")
