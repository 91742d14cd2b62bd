"""
Memorial Backend - Request Logging Middleware
==============================================

What:  One access-log line per HTTP request, with status and duration.
How:   Measures from middleware entry to response return; the level follows
       the status class (5xx ERROR, 4xx WARNING, otherwise INFO).
Why:   Uvicorn's own access log has no request ID and no duration; it is
       silenced in setup_logging() and replaced by this line.
When:  Runs inside RequestIDMiddleware, so the request ID is available.

Logged:      method, path, status, duration, client IP, request ID
Not logged:  request bodies (engager lists, token IDs) and headers

Typical durations:
    - POST /api/get-engagers:          ~1000ms (simulated lookup latency)
    - POST /api/generate-memorial-nft: 1-12s (tile fetches + two pin uploads)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from memorial.middleware.request_id import request_id_var

logger = logging.getLogger("memorial.access")

SKIPPED_PATHS = {"/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Duration covers everything after this middleware: validation, tile
    fetches, compositing, pin uploads and serialization.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        # Container health checks hit /health every few seconds
        if path in SKIPPED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        # 5xx ERROR (our fault), 4xx WARNING (client input), else INFO
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )
        return response
