"""
Memorial Backend - Engager Lookup Route
========================================

What:  POST /api/get-engagers returns the ranked engagers of a handle.
How:   Body is validated by EngagerLookupRequest (missing fname → 400 via the
       global validation handler), then delegated to EngagerService.
"""

import logging

from fastapi import APIRouter

from memorial.schemas.engager import EngagerLookupRequest, EngagersResponse, ErrorResponse
from memorial.services.engager_service import engager_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Engagers"])


@router.post(
    "/get-engagers",
    response_model=EngagersResponse,
    responses={
        200: {"description": "Ranked engagers", "model": EngagersResponse},
        400: {"description": "Missing or invalid fname", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Look up the top engagers of a handle",
)
async def get_engagers(body: EngagerLookupRequest) -> EngagersResponse:
    engagers = await engager_service.get_engagers(body.fname)
    logger.info("Returning %d engagers for @%s", len(engagers), body.fname)
    return EngagersResponse(engagers=engagers)
