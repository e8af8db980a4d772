"""
Accounting Notes Backend: Request Logging Middleware
====================================================

What:  One access log line per request: method, path, status, duration,
       request ID, client IP.
How:   Level follows the status (5xx ERROR, 4xx WARNING, else INFO).
       /health is skipped; monitors call it every few seconds.

Typical durations:
    - GET /categories: 10-50ms
    - PUT .../notes: 1-5s, dominated by speech synthesis and upload

Request bodies are never logged: notes may contain client data.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("accounting_notes.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path == "/health":
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
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
            request.method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
        )
        return response
