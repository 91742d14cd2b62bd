"""
Memorial Backend - Pydantic Request/Response Schemas
=====================================================

What:  Pydantic models defining the API contract between frontend and backend.
How:   FastAPI validates request bodies against these models, serializes
       responses through them, and builds the OpenAPI docs from them.

Wire naming:
    Engager records keep the snake_case field names the data source emits
    (fname, fid, engagement_score, ...). Memorial request/response fields use
    the camelCase names the frontend sends and reads (tokenId, imageCID, ...),
    exposed through aliases so Python code stays snake_case.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Domain Records
# ══════════════════════════════════════════════════════════════════════════


class EngagerRecord(BaseModel):
    """
    One social account that engaged with the memorialized handle.

    Records arrive ordered by descending engagement; that order is owned by
    the data source and is preserved everywhere downstream.
    """

    fname: str = Field(min_length=1, description="Account handle")
    fid: int = Field(description="Numeric account ID")
    engagement_score: Union[int, float] = Field(description="Relative engagement score")
    casts: int = Field(ge=0, description="Number of casts exchanged")
    followers: str = Field(description="Follower count label, e.g. '15.2k'")
    pfp_url: Optional[str] = Field(
        default=None,
        description="Profile picture URL (placeholder tile is used when absent)",
    )

    model_config = {"frozen": True}


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class EngagerLookupRequest(BaseModel):
    """Body of POST /api/get-engagers."""

    fname: str = Field(min_length=1, description="Handle to look up engagers for")


class MemorialRequest(BaseModel):
    """
    Body of POST /api/generate-memorial-nft.

    Only the first five engagers are rendered and listed in the metadata;
    extra entries are accepted and ignored.
    """

    fname: str = Field(min_length=1, description="Handle being memorialized")
    token_id: Union[int, str] = Field(alias="tokenId", description="Token ID of the memorial")
    engagers: List[EngagerRecord] = Field(
        min_length=1,
        description="Ranked engagers whose profile pictures form the grid",
    )

    model_config = {"populate_by_name": True}


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class EngagersResponse(BaseModel):
    success: bool = Field(default=True)
    engagers: List[EngagerRecord] = Field(description="Ranked engager records")


class MemorialResponse(BaseModel):
    """
    Result of a successful memorial generation.

    Example:
        {
            "success": true,
            "imageCID": "bafy...img",
            "metadataCID": "bafy...meta",
            "imageURI": "ipfs://bafy...img",
            "metadataURI": "ipfs://bafy...meta",
            "gatewayImage": "https://gateway.pinata.cloud/ipfs/bafy...img",
            "gatewayMetadata": "https://gateway.pinata.cloud/ipfs/bafy...meta"
        }
    """

    success: bool = Field(default=True)
    image_cid: str = Field(alias="imageCID")
    metadata_cid: str = Field(alias="metadataCID")
    image_uri: str = Field(alias="imageURI")
    metadata_uri: str = Field(alias="metadataURI")
    gateway_image: str = Field(alias="gatewayImage")
    gateway_metadata: str = Field(alias="gatewayMetadata")

    model_config = {"populate_by_name": True}


class MetadataAttribute(BaseModel):
    trait_type: str
    value: str


class MemorialMetadata(BaseModel):
    """Metadata document pinned alongside the composite image."""

    name: str
    description: str
    image: str = Field(description="ipfs:// URI of the pinned composite")
    attributes: List[MetadataAttribute] = Field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Field 'fname' is required",
            "details": {"field": "fname"},
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    pinning: str = Field(description="Pinning credentials: configured, missing_credentials")
    uptime_seconds: float = Field(description="Seconds since service started")
