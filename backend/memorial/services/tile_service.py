"""
Memorial Backend - Tile Acquisition Service
============================================

What:  Turns ranked engager records into exactly-sized grid tiles.
How:   Fetches every profile picture concurrently (fan-out with
       asyncio.gather, fan-in before returning), decodes with Pillow,
       and folds each failed fetch into a solid placeholder tile.
Who:   Called by MemorialService before composition.

Failure model:
    Each fetch returns a TileFetchResult, either carrying a decoded bitmap
    or the reason it failed. Network errors, non-2xx responses, timeouts
    (settings.tile_fetch_timeout, counted over the whole fetch) and decode
    errors all become failures, and so does a malformed URL
    (httpx.InvalidURL is not an httpx.HTTPError). acquire_tiles() branches
    on the result explicitly; a failure costs one placeholder and nothing
    else. There are no retries.
"""

import asyncio
import io
import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

import httpx
from PIL import Image, ImageOps

from memorial.config import settings
from memorial.schemas.engager import EngagerRecord
from memorial.services.compositor import TILE_SIZE, SourceTile, make_placeholder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileFetchResult:
    """Outcome of one tile acquisition: an image, or the reason there is none."""

    image: Optional[Image.Image] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.image is not None

    @classmethod
    def success(cls, image: Image.Image) -> "TileFetchResult":
        return cls(image=image)

    @classmethod
    def failure(cls, reason: str) -> "TileFetchResult":
        return cls(error=reason)


def decode_tile(content: bytes) -> Image.Image:
    """
    Decode raw image bytes into a 200x200 RGB tile.

    Non-square pictures are center-cropped to fill the square, matching how
    profile pictures are usually displayed.

    Raises:
        OSError / PIL.UnidentifiedImageError: content is not a decodable image.
    """
    with Image.open(io.BytesIO(content)) as source:
        rgb = source.convert("RGB")
    return ImageOps.fit(rgb, (TILE_SIZE, TILE_SIZE), method=Image.Resampling.LANCZOS)


class TileService:
    """
    Fetch-or-placeholder tile acquisition.

    Args:
        timeout:   Per-tile budget in seconds (defaults to settings).
        transport: Optional httpx transport, used by tests to stub the network.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.tile_fetch_timeout
        self._transport = transport

    async def fetch_tile(self, client: httpx.AsyncClient, url: Optional[str]) -> TileFetchResult:
        """
        Fetch and decode one profile picture.

        Never raises for network or image problems; those come back as a
        failed TileFetchResult.
        """
        if not url:
            return TileFetchResult.failure("no profile image URL")

        start_time = time.perf_counter()
        try:
            response = await asyncio.wait_for(client.get(url), timeout=self.timeout)
            response.raise_for_status()
            image = decode_tile(response.content)
        except asyncio.TimeoutError:
            return TileFetchResult.failure(f"timed out after {self.timeout:.0f}s")
        except httpx.HTTPStatusError as e:
            return TileFetchResult.failure(f"HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            return TileFetchResult.failure(f"{type(e).__name__}: {e}")
        except httpx.InvalidURL as e:
            return TileFetchResult.failure(f"invalid URL: {e}")
        except (OSError, ValueError, Image.DecompressionBombError) as e:
            return TileFetchResult.failure(f"decode failed: {e}")

        logger.debug(
            "Fetched tile from %s in %.0fms",
            url,
            (time.perf_counter() - start_time) * 1000,
        )
        return TileFetchResult.success(image)

    async def acquire_tiles(self, engagers: Sequence[EngagerRecord]) -> List[SourceTile]:
        """
        Resolve one tile per engager, for at most settings.max_tiles engagers.

        All fetches run concurrently and the call returns only once every one
        has resolved. Output order matches input order.
        """
        selected = list(engagers[: settings.max_tiles])
        if not selected:
            return []

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self.timeout,
            follow_redirects=True,
        ) as client:
            results = await asyncio.gather(
                *(self.fetch_tile(client, engager.pfp_url) for engager in selected)
            )

        tiles: List[SourceTile] = []
        for engager, result in zip(selected, results):
            if result.ok:
                tiles.append(SourceTile(image=result.image, owner_handle=engager.fname))
            else:
                logger.warning(
                    "Using placeholder tile for @%s: %s", engager.fname, result.error
                )
                tiles.append(make_placeholder(engager.fname))

        placeholders = sum(1 for tile in tiles if tile.is_placeholder)
        logger.info(
            "Acquired %d tiles (%d placeholders)", len(tiles), placeholders
        )
        return tiles


tile_service = TileService()
