"""
Xync Backend — Request Logging Middleware
=========================================

What:  One access log line per HTTP request: method, path, status, duration.
How:   Measures time around the downstream call and logs at a level chosen
       by status class (5xx ERROR, 4xx WARNING, else INFO).

What we log vs what we DON'T log:
    Log:        method, path, status, duration, client IP, request id,
                authenticated user id (when the auth middleware set one)
    Never log:  request or response bodies, query strings, the
                Authorization header
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from xync.middleware.request_id import request_id_var

logger = logging.getLogger("xync.access")

QUIET_PATHS = {"/health", "/health/live", "/health/ready", "/metrics"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Health checks and metric scrapes run every few seconds and would bury real traffic
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        client_ip = request.client.host if request.client else "unknown"
        user_id = getattr(request.state, "user_id", None)
        rid = request_id_var.get("")

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "user_id": str(user_id) if user_id else None,
            },
        )
        return response
