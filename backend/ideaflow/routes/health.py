"""
IdeaFlow Backend — Health and Status Routes
=============================================

What:  GET /health for load balancers and container probes, and GET /api as
       the banner the frontend uses to check the API is mounted.
How:   /health runs `SELECT 1` through the application's Database handle.
       A failed probe reports "unhealthy" with HTTP 503.
"""

import logging
import time

from fastapi import APIRouter, Depends, Response

from ideaflow import __version__
from ideaflow.database import Database, get_database
from ideaflow.schemas.common import ApiStatusResponse, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    response: Response,
    database: Database = Depends(get_database),
) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        await database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )


@router.get("/api", response_model=ApiStatusResponse, summary="API status banner")
async def api_status() -> ApiStatusResponse:
    return ApiStatusResponse(version=__version__)
