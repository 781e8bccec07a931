"""
Xync Backend — Metrics Route
============================

What:  GET /metrics in the Prometheus text exposition format (public, like
       the health checks; scrapers do not carry user tokens).
"""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from xync.middleware.metrics import registry

router = APIRouter(tags=["Health"])


@router.get("/metrics", summary="Prometheus metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)
