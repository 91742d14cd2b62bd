"""
Memorial Backend - Tile Service Unit Tests
===========================================

What:  Fetch-or-placeholder behavior of TileService.
How:   httpx.MockTransport stands in for the network; no real requests.

What we test:
    ✅ Successful fetch yields a fitted 200x200 RGB tile
    ✅ HTTP errors, network errors, timeouts and bad bytes become placeholders
    ✅ Malformed URLs become placeholders instead of raising
    ✅ One failure never affects the other tiles
    ✅ Input is truncated to five engagers, order preserved
"""

import asyncio

import httpx
import pytest

from memorial.schemas.engager import EngagerRecord
from memorial.services.compositor import PLACEHOLDER_COLOR, TILE_SIZE
from memorial.services.tile_service import TileFetchResult, TileService, decode_tile


def _engager(name, url="auto"):
    return EngagerRecord(
        fname=name,
        fid=1,
        engagement_score=1,
        casts=0,
        followers="0",
        pfp_url=f"https://img.test/{name}.png" if url == "auto" else url,
    )


class TestDecodeTile:
    def test_non_square_image_is_fitted(self, png_bytes):
        tile = decode_tile(png_bytes(size=(320, 180)))
        assert tile.size == (TILE_SIZE, TILE_SIZE)
        assert tile.mode == "RGB"

    def test_rgba_is_converted(self):
        import io
        from PIL import Image

        buffer = io.BytesIO()
        Image.new("RGBA", (50, 50), (0, 0, 255, 128)).save(buffer, format="PNG")
        assert decode_tile(buffer.getvalue()).mode == "RGB"

    def test_garbage_raises(self):
        with pytest.raises(OSError):
            decode_tile(b"definitely not an image")


class TestTileFetchResult:
    def test_success_and_failure_tags(self):
        from PIL import Image

        assert TileFetchResult.success(Image.new("RGB", (1, 1))).ok is True
        failed = TileFetchResult.failure("boom")
        assert failed.ok is False
        assert failed.error == "boom"


class TestAcquireTiles:
    @pytest.mark.asyncio
    async def test_successful_fetches(self, image_transport, sample_engagers):
        service = TileService(transport=image_transport)
        tiles = await service.acquire_tiles(sample_engagers)

        assert [t.owner_handle for t in tiles] == ["v", "ccarella", "pedro"]
        assert all(not t.is_placeholder for t in tiles)
        assert all(t.image.size == (TILE_SIZE, TILE_SIZE) for t in tiles)
        assert tiles[0].image.getpixel((100, 100)) == (255, 0, 0)
        assert len(image_transport.requested) == 3

    @pytest.mark.asyncio
    async def test_http_error_becomes_placeholder(self, png_bytes):
        def handler(request):
            if "broken" in request.url.path:
                return httpx.Response(404)
            return httpx.Response(200, content=png_bytes())

        service = TileService(transport=httpx.MockTransport(handler))
        tiles = await service.acquire_tiles([_engager("ok"), _engager("broken"), _engager("fine")])

        assert [t.is_placeholder for t in tiles] == [False, True, False]
        assert tiles[1].owner_handle == "broken"
        assert tiles[1].image.getpixel((0, 0)) == PLACEHOLDER_COLOR

    @pytest.mark.asyncio
    async def test_network_error_becomes_placeholder(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = TileService(transport=httpx.MockTransport(handler))
        tiles = await service.acquire_tiles([_engager("offline")])

        assert len(tiles) == 1
        assert tiles[0].is_placeholder
        assert tiles[0].image.size == (TILE_SIZE, TILE_SIZE)

    @pytest.mark.asyncio
    async def test_undecodable_body_becomes_placeholder(self):
        handler = lambda request: httpx.Response(200, content=b"<html>not a picture</html>")
        service = TileService(transport=httpx.MockTransport(handler))

        tiles = await service.acquire_tiles([_engager("html")])
        assert tiles[0].is_placeholder

    @pytest.mark.asyncio
    async def test_timeout_becomes_placeholder(self, png_bytes):
        async def handler(request):
            if "slow" in request.url.path:
                await asyncio.sleep(1)
            return httpx.Response(200, content=png_bytes())

        service = TileService(timeout=0.05, transport=httpx.MockTransport(handler))
        tiles = await service.acquire_tiles([_engager("slow"), _engager("fast")])

        assert tiles[0].is_placeholder
        assert not tiles[1].is_placeholder

    @pytest.mark.asyncio
    async def test_missing_url_skips_request(self, image_transport):
        service = TileService(transport=image_transport)
        tiles = await service.acquire_tiles([_engager("nopic", url=None), _engager("pic")])

        assert tiles[0].is_placeholder
        assert not tiles[1].is_placeholder
        assert image_transport.requested == ["https://img.test/pic.png"]

    @pytest.mark.asyncio
    async def test_malformed_url_becomes_placeholder(self, image_transport):
        service = TileService(transport=image_transport)
        tiles = await service.acquire_tiles(
            [_engager("bad", url="http://img.test:port/a.png"), _engager("good")]
        )

        assert tiles[0].is_placeholder
        assert tiles[0].owner_handle == "bad"
        assert not tiles[1].is_placeholder
        assert image_transport.requested == ["https://img.test/good.png"]

    @pytest.mark.asyncio
    async def test_invalid_port_is_tagged_failure(self, image_transport):
        service = TileService(transport=image_transport)
        async with httpx.AsyncClient(transport=image_transport) as client:
            result = await service.fetch_tile(client, "http://img.test:port/a.png")

        assert result.ok is False
        assert result.error.startswith("invalid URL")

    @pytest.mark.asyncio
    async def test_only_first_five_engagers_are_fetched(self, image_transport):
        engagers = [_engager(f"user{i}") for i in range(7)]
        service = TileService(transport=image_transport)

        tiles = await service.acquire_tiles(engagers)

        assert [t.owner_handle for t in tiles] == [f"user{i}" for i in range(5)]
        assert len(image_transport.requested) == 5
        assert "https://img.test/user5.png" not in image_transport.requested

    @pytest.mark.asyncio
    async def test_empty_input(self, image_transport):
        service = TileService(transport=image_transport)
        assert await service.acquire_tiles([]) == []
