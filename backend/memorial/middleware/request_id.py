"""
Memorial Backend - Request ID Middleware
=========================================

What:  Assigns a correlation ID to each request and echoes it in the response.
Why:   A memorial request fans out into several tile fetches and two pin
       uploads; the ID ties their log lines back to the one client call.
How:   Reuses the client's X-Request-ID header when present, otherwise a short
       UUID; stores it in a ContextVar for loggers and exception handlers and
       in request.state for route handlers.
When:  Outermost middleware, so every other layer sees the ID.

The ContextVar is not reset after the response: the catch-all exception
handler runs in ServerErrorMiddleware, outside this one, and still reads it
to fill `request_id` in the 500 body. Each request runs in its own
context, so the value never leaks into the next one.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Use the client's X-Request-ID if it sent one (frontend tracing)
        2. Otherwise generate an 8-character UUID prefix
        3. Store it in request_id_var and request.state.request_id
        4. Copy it onto the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # An empty header counts as absent
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)

        # Why: clients quote this ID when reporting a failed memorial
        response.headers[REQUEST_ID_HEADER] = rid
        return response
