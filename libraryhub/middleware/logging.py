"""
LibraryHub Backend — Access Log Middleware
============================================

What:  One log line per request on the `libraryhub.access` logger:

    GET /api/search 200 12.4ms [1a2b3c4d] from 10.0.0.7

Level follows the status: 5xx → ERROR, 4xx → WARNING, otherwise INFO.
`/health` is skipped because probes hit it every few seconds. Query
strings are not logged; search text and account numbers stay out of the
access log.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from libraryhub.middleware.request_id import request_id_var

logger = logging.getLogger("libraryhub.access")

_QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status, duration and request id for each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in _QUIET_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")
        status = response.status_code

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
