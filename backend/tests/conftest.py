"""
Memorial Backend - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment overrides are applied before the `memorial` package is
       imported, so module-level singletons (settings, services) pick them up.

Fixtures:
    ├── png_bytes:          Factory for solid-color PNG bytes
    ├── image_transport:    httpx.MockTransport serving PNGs for any URL
    ├── pinata_transport:   httpx.MockTransport faking Pinata's pin endpoints
    ├── sample_engagers:    Three engager records with profile picture URLs
    └── test_client:        HTTPX AsyncClient bound to the FastAPI app
"""

import io
import json
import os

# Override settings for testing BEFORE any memorial imports
os.environ["PINATA_JWT"] = "test-jwt-not-real"
os.environ["ENGAGER_LOOKUP_DELAY"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image

from memorial.schemas.engager import EngagerRecord


@pytest.fixture
def png_bytes():
    """Returns a factory: png_bytes(color, size=(64, 64)) -> PNG-encoded bytes."""

    def _make(color=(255, 0, 0), size=(64, 64)) -> bytes:
        buffer = io.BytesIO()
        Image.new("RGB", size, color).save(buffer, format="PNG")
        return buffer.getvalue()

    return _make


@pytest.fixture
def image_transport(png_bytes):
    """Serves a red PNG for every GET; records the requested URLs."""
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content=png_bytes(), headers={"Content-Type": "image/png"})

    transport = httpx.MockTransport(handler)
    transport.requested = requested
    return transport


@pytest.fixture
def pinata_transport():
    """
    Fakes pinFileToIPFS / pinJSONToIPFS.

    Returns CID "bafyimage" for file pins and "bafymeta" for JSON pins, and
    keeps every request in `transport.requests` for assertions.
    """
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path.endswith("/pinning/pinFileToIPFS"):
            return httpx.Response(200, json={"IpfsHash": "bafyimage", "PinSize": 1234})
        if request.url.path.endswith("/pinning/pinJSONToIPFS"):
            json.loads(request.content)
            return httpx.Response(200, json={"IpfsHash": "bafymeta", "PinSize": 321})
        return httpx.Response(404, json={"error": "not found"})

    transport = httpx.MockTransport(handler)
    transport.requests = requests
    return transport


@pytest.fixture
def sample_engagers():
    return [
        EngagerRecord(
            fname="v", fid=2, engagement_score=980, casts=120, followers="15.2k",
            pfp_url="https://img.test/v.png",
        ),
        EngagerRecord(
            fname="ccarella", fid=3, engagement_score=750, casts=80, followers="10.5k",
            pfp_url="https://img.test/ccarella.png",
        ),
        EngagerRecord(
            fname="pedro", fid=4, engagement_score=520, casts=200, followers="2.1k",
            pfp_url="https://img.test/pedro.png",
        ),
    ]


@pytest_asyncio.fixture
async def test_client():
    """
    HTTPX AsyncClient routed straight into the FastAPI app (no server).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from memorial.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
