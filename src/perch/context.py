"""Request-scoped context via ContextVar.

``request_var`` holds the current ``Request``. The handler pipeline
sets it before dispatch and resets it afterwards.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    free-threading. No locks needed.
"""

from contextvars import ContextVar

from perch.http.request import Request

request_var: ContextVar[Request] = ContextVar("perch_request")


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()
