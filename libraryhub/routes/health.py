"""
LibraryHub Backend — Health Check Route
=========================================

What:  GET /health for container probes and load balancers.

The service has a single hard dependency, the database. If a trivial query
fails the instance reports "unhealthy" and answers 503 so traffic moves
elsewhere.
"""

import logging
import time

from fastapi import APIRouter, Response, status
from sqlalchemy import text

from libraryhub import __version__
from libraryhub.database import engine
from libraryhub.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(response: Response) -> HealthResponse:
    """Run SELECT 1 against the database and report uptime."""
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
