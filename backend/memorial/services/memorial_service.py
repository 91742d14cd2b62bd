"""
Memorial Backend - Memorial Service (Orchestrator)
===================================================

What:  Runs the whole memorial generation workflow for one request.
Who:   Called by POST /api/generate-memorial-nft.

Orchestration Flow:
    ┌──────────────┐    ┌────────────┐    ┌────────────┐    ┌──────────────┐
    │ Acquire tiles│───▶│  Compose   │───▶│ Pin image  │───▶│ Pin metadata │
    │ (TileServ)   │    │ (800x500)  │    │ (file)     │    │ (JSON)       │
    └──────────────┘    └────────────┘    └────────────┘    └──────────────┘

    A blank handle raises ValidationError before any collaborator is called.
    Tile failures are absorbed by placeholders. Pinning failures propagate
    as PinningServiceError. Metadata is only pinned after the image pin
    succeeds; if the metadata pin then fails, the image pin stays (its CID
    is logged and attached to the error context).
"""

import logging
from typing import List, Sequence

from memorial.config import settings
from memorial.exceptions import PinningServiceError
from memorial.schemas.engager import (
    EngagerRecord,
    MemorialMetadata,
    MemorialRequest,
    MemorialResponse,
    MetadataAttribute,
)
from memorial.services.compositor import compose_grid, encode_image
from memorial.services.engager_service import normalize_handle
from memorial.services.pinning_service import ipfs_uri, pinning_service
from memorial.services.tile_service import tile_service

logger = logging.getLogger(__name__)

_CONTENT_TYPES = {"PNG": "image/png", "WEBP": "image/webp", "BMP": "image/bmp"}


def build_metadata(
    fname: str,
    token_id: str,
    image_cid: str,
    engagers: Sequence[EngagerRecord],
) -> MemorialMetadata:
    """One attribute per engager, in rank order, for at most max_tiles engagers."""
    attributes: List[MetadataAttribute] = [
        MetadataAttribute(trait_type=f"Engager #{rank}", value=f"@{engager.fname}")
        for rank, engager in enumerate(engagers[: settings.max_tiles], start=1)
    ]
    return MemorialMetadata(
        name=f"Memorial #{token_id}: @{fname}",
        description=(
            f"A memorial of @{fname} and the {len(attributes)} accounts "
            f"that engaged with them the most."
        ),
        image=ipfs_uri(image_cid),
        attributes=attributes,
    )


class MemorialService:
    """Stateless orchestrator; collaborators are module-level singletons."""

    async def generate(self, request: MemorialRequest) -> MemorialResponse:
        normalize_handle(request.fname)
        token_id = str(request.token_id)
        engagers = request.engagers[: settings.max_tiles]

        logger.info(
            "Generating memorial for @%s token=%s with %d engagers (%d received)",
            request.fname,
            token_id,
            len(engagers),
            len(request.engagers),
        )

        # Step 1: tiles (never fails; placeholders fill the gaps)
        tiles = await tile_service.acquire_tiles(engagers)

        # Step 2: composite
        composite = compose_grid(tiles)
        image_format = settings.composite_format
        image_bytes = encode_image(composite, image_format)
        extension = image_format.lower()

        # Step 3: image pin
        base_name = f"memorial-{request.fname}-{token_id}"
        image_cid = await pinning_service.pin_file(
            image_bytes,
            filename=f"{base_name}.{extension}",
            name=f"{base_name}.{extension}",
            content_type=_CONTENT_TYPES[image_format],
        )

        # Step 4: metadata pin
        metadata = build_metadata(request.fname, token_id, image_cid, engagers)
        try:
            metadata_cid = await pinning_service.pin_json(
                metadata.model_dump(), name=f"{base_name}.json"
            )
        except PinningServiceError as e:
            logger.warning(
                "Metadata pin failed; image %s stays pinned without metadata", image_cid
            )
            e.context["pinned_cid"] = image_cid
            raise

        logger.info(
            "Memorial for @%s token=%s pinned: image=%s metadata=%s",
            request.fname,
            token_id,
            image_cid,
            metadata_cid,
        )

        return MemorialResponse(
            image_cid=image_cid,
            metadata_cid=metadata_cid,
            image_uri=ipfs_uri(image_cid),
            metadata_uri=ipfs_uri(metadata_cid),
            gateway_image=pinning_service.gateway_link(image_cid),
            gateway_metadata=pinning_service.gateway_link(metadata_cid),
        )


memorial_service = MemorialService()
