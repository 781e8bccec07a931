"""
Xync Backend — Request Metrics Middleware
=========================================

What:  Prometheus request counter and latency histogram, exposed at /metrics.
How:   Times every request around the downstream call and records it under
       the route template (/bookmarks/{bookmark_id}), never the concrete
       path.

Metrics:
    http_requests_total{method, path, status}              counter
    http_request_duration_seconds{method, path, status}    histogram

Requests that match no route (including 401s for unknown paths) share the
path label "<unmatched>".

The collectors live in their own CollectorRegistry, not the global default.
"""

import time

from prometheus_client import CollectorRegistry, Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

UNMATCHED_PATH = "<unmatched>"

registry = CollectorRegistry()

REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "HTTP requests handled, by method, route template and status code.",
    ("method", "path", "status"),
    registry=registry,
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds, by method, route template and status code.",
    ("method", "path", "status"),
    registry=registry,
)


def route_template(request: Request) -> str:
    """The path pattern of the route that serves `request`."""
    partial = None
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", UNMATCHED_PATH)
        if match == Match.PARTIAL and partial is None:
            # Path matched, method did not (405)
            partial = getattr(route, "path", None)
    return partial or UNMATCHED_PATH


class MetricsMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = route_template(request)
        start_time = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start_time

        labels = (request.method, path, str(response.status_code))
        REQUESTS_TOTAL.labels(*labels).inc()
        REQUEST_DURATION.labels(*labels).observe(elapsed)
        return response
