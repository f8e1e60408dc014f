"""
Health endpoint.

  GET /health -- Liveness probe (always returns 200 if process is alive)
"""

import time

from fastapi import APIRouter, Request

from ..models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def liveness(request: Request) -> HealthResponse:
    """Liveness probe -- returns 200 if the process is running."""
    enforcer = request.app.state.enforcer
    start_time = getattr(request.app.state, "start_time", time.time())
    return HealthResponse(
        status="healthy",
        profiles_loaded=len(enforcer.registry),
        uptime_seconds=round(time.time() - start_time, 1),
    )
