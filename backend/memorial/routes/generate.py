"""
Memorial Backend - Memorial Generation Route
=============================================

What:  POST /api/generate-memorial-nft builds the engager grid image, pins it
       and its metadata, and returns both CIDs.
How:   MemorialRequest validates the body before any work starts, so a bad
       request never reaches the tile fetcher or the pinning service.

Request Flow:
    1. FastAPI validates {fname, tokenId, engagers[≥1]}   (400 on failure)
    2. MemorialService.generate() runs the workflow
    3. 200 with CIDs, URIs and gateway links

Error responses (handled by global exception handlers):
    HTTP 400: Missing/invalid field (RequestValidationError / ValidationError)
    HTTP 500: Pinning upload failed (PinningServiceError) or unexpected error
"""

import logging

from fastapi import APIRouter

from memorial.schemas.engager import ErrorResponse, MemorialRequest, MemorialResponse
from memorial.services.memorial_service import memorial_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Memorial"])


@router.post(
    "/generate-memorial-nft",
    response_model=MemorialResponse,
    responses={
        200: {"description": "Image and metadata pinned", "model": MemorialResponse},
        400: {"description": "Invalid request body", "model": ErrorResponse},
        500: {"description": "Pinning failed or server error", "model": ErrorResponse},
    },
    summary="Generate and pin a memorial grid image with metadata",
)
async def generate_memorial_nft(body: MemorialRequest) -> MemorialResponse:
    """
    Compose up to five engager profile pictures into an 800x500 grid and pin
    it, together with a metadata document, to IPFS.

    Profile pictures that cannot be fetched are replaced by gray placeholders;
    they never fail the request.
    """
    return await memorial_service.generate(body)
