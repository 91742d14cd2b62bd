"""
Memorial Backend - Pinning Service (Pinata)
============================================

What:  Uploads the composite image and its metadata document to Pinata and
       returns the resulting content identifiers (CIDs).
How:   Two authenticated httpx calls:
           POST /pinning/pinFileToIPFS   multipart file + pinataMetadata
           POST /pinning/pinJSONToIPFS   {"pinataContent", "pinataMetadata"}
       Both answer with {"IpfsHash": "<cid>", ...}.
Who:   Called by MemorialService after composition.

Error Handling:
    Every failure (missing JWT, transport error, timeout, non-2xx status,
    response without IpfsHash) raises PinningServiceError. Upstream response
    bodies are logged but not copied into the exception message, which is
    returned to clients. Calls are not retried.
"""

import json
import logging
import time
from typing import Any, Dict, Optional

import httpx

from memorial.config import pinata_jwt_is_set, settings
from memorial.exceptions import PinningServiceError

logger = logging.getLogger(__name__)

IPFS_SCHEME = "ipfs://"


def ipfs_uri(cid: str) -> str:
    return f"{IPFS_SCHEME}{cid}"


class PinningService:
    """
    Thin client for the two Pinata pinning endpoints this backend uses.

    Args:
        jwt:         Bearer token; defaults to settings.pinata_jwt.
        api_url:     Pinata API base URL.
        gateway_url: Base URL used to build browsable gateway links.
        timeout:     Per-call timeout in seconds.
        transport:   Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        jwt: Optional[str] = None,
        api_url: Optional[str] = None,
        gateway_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.jwt = jwt if jwt is not None else settings.pinata_jwt
        self.api_url = (api_url or settings.pinata_api_url).rstrip("/")
        self.gateway_url = (gateway_url or settings.pinata_gateway_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.pinning_timeout
        self._transport = transport

    def is_configured(self) -> bool:
        return pinata_jwt_is_set(self.jwt)

    def gateway_link(self, cid: str) -> str:
        return f"{self.gateway_url}/{cid}"

    async def pin_file(
        self,
        content: bytes,
        filename: str,
        name: Optional[str] = None,
        content_type: str = "image/png",
    ) -> str:
        """
        Pin a binary file and return its CID.

        Raises:
            PinningServiceError: on any upload failure.
        """
        files = {"file": (filename, content, content_type)}
        data = {"pinataMetadata": json.dumps({"name": name or filename})}
        return await self._pin(
            operation="pin_file",
            path="/pinning/pinFileToIPFS",
            files=files,
            data=data,
            size=len(content),
        )

    async def pin_json(self, document: Dict[str, Any], name: str) -> str:
        """
        Pin a JSON document and return its CID.

        Raises:
            PinningServiceError: on any upload failure.
        """
        payload = {"pinataContent": document, "pinataMetadata": {"name": name}}
        return await self._pin(
            operation="pin_json",
            path="/pinning/pinJSONToIPFS",
            json=payload,
        )

    async def _pin(self, operation: str, path: str, size: Optional[int] = None, **request_kwargs) -> str:
        if not self.is_configured():
            logger.error("Pinning attempted without credentials (%s)", operation)
            raise PinningServiceError(
                message="Pinning service credentials are not configured",
                operation=operation,
            )

        url = f"{self.api_url}{path}"
        headers = {"Authorization": f"Bearer {self.jwt}"}
        start_time = time.perf_counter()

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(url, headers=headers, **request_kwargs)
        except httpx.HTTPError as e:
            logger.error("Pinning %s failed before a response: %s", operation, str(e))
            raise PinningServiceError(
                message="Could not reach the pinning service",
                operation=operation,
                context={"error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000

        if response.status_code >= 400:
            logger.error(
                "Pinning %s returned HTTP %d after %.0fms: %s",
                operation,
                response.status_code,
                duration_ms,
                response.text[:500],
            )
            raise PinningServiceError(
                message="The pinning service rejected the upload",
                operation=operation,
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError:
            body = None
        cid = body.get("IpfsHash") if isinstance(body, dict) else None
        if not cid:
            logger.error("Pinning %s response had no IpfsHash: %s", operation, response.text[:500])
            raise PinningServiceError(
                message="The pinning service returned no content identifier",
                operation=operation,
                status_code=response.status_code,
            )

        logger.info(
            "Pinned %s in %.0fms -> %s%s",
            operation,
            duration_ms,
            cid,
            f" ({size} bytes)" if size is not None else "",
        )
        return cid


pinning_service = PinningService()
