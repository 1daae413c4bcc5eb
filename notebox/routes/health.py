"""
NoteBox: Health Check Route
==============================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 against the app's database and reports the result.
Who:   Called by container health checks and load balancers.

Status levels:
    - healthy:   Database reachable (HTTP 200)
    - unhealthy: Database unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from notebox import __version__
from notebox.schemas.note import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """
    Check the health of the service and its database.

    SELECT 1 is essentially free, so probing every few seconds is fine.
    """
    reachable = await request.app.state.database.ping()
    if not reachable:
        response.status_code = 503
        logger.warning("Health check: database unreachable")

    return HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        database="connected" if reachable else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
