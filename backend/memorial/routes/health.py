"""
Memorial Backend - Health Check Route
======================================

What:  GET /health for container health checks and monitoring.
How:   Reports uptime and whether pinning credentials are configured. No
       outbound calls are made, so the check stays cheap and never consumes
       pinning quota.

Status levels:
    - healthy:   Credentials present
    - degraded:  Credentials missing (engager lookup still works; generation
                 will fail with 500 until configured)
"""

import time

from fastapi import APIRouter

from memorial import __version__
from memorial.schemas.engager import HealthResponse
from memorial.services.pinning_service import pinning_service

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    configured = pinning_service.is_configured()
    return HealthResponse(
        status="healthy" if configured else "degraded",
        version=__version__,
        pinning="configured" if configured else "missing_credentials",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
