"""
Xync Backend — Health Check Routes
==================================

What:  Health checks for load balancers, container orchestrators and uptime monitors.

Endpoints (all public):
    GET /health        combined status, version, database, uptime
    GET /health/live   liveness: the process answers; no database access
    GET /health/ready  readiness: SELECT 1 succeeds; 503 "not_ready" otherwise

A liveness check must not depend on the database, otherwise a database
outage makes the orchestrator restart healthy processes.
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from xync import __version__
from xync.database import get_db_session
from xync.schemas.common import HealthResponse, LivenessResponse, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


async def _database_reachable(db: AsyncSession) -> bool:
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        await db.rollback()
        logger.warning("Health check: database unreachable: %s", type(e).__name__)
        return False
    return True


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> HealthResponse:
    healthy = await _database_reachable(db)
    if not healthy:
        response.status_code = 503

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=__version__,
        database="connected" if healthy else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )


@router.get("/health/live", response_model=LivenessResponse, summary="Liveness check")
async def liveness() -> LivenessResponse:
    return LivenessResponse(status="ok", version=__version__)


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    responses={503: {"description": "Database unreachable", "model": ReadinessResponse}},
)
async def readiness(
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> ReadinessResponse:
    if await _database_reachable(db):
        return ReadinessResponse(status="ready", database="connected")
    response.status_code = 503
    return ReadinessResponse(status="not_ready", database="disconnected")
