"""
Outbound fetch for the upload-from-URL flow.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from cdn_gateway.core.error_codes import ErrorCode
from cdn_gateway.core.errors import ApiError

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_CONTENT_TYPE = "image/png"


@dataclass(frozen=True)
class RemoteObject:
    url: str
    body: bytes
    content_type: str


class RemoteFetcher:
    """
    Fetch a remote resource into memory.

    ``timeout_seconds`` and ``max_bytes`` default to None (no limit). The body is
    read as a stream so the byte cap aborts the transfer as soon as it is crossed.
    """

    def __init__(
        self,
        timeout_seconds: float | None = None,
        max_bytes: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.max_bytes = max_bytes
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_seconds),
            follow_redirects=True,
            transport=self._transport,
        )

    async def fetch(self, url: str) -> RemoteObject:
        try:
            async with self._client() as client:
                async with client.stream("GET", url) as response:
                    if not response.is_success:
                        logger.warning("Remote fetch of %s returned %s", url, response.status_code)
                        raise ApiError(
                            status_code=400,
                            code=ErrorCode.UPSTREAM_FETCH_FAILED,
                            message=f"Failed to fetch: {response.status_code}",
                        )
                    content_type = response.headers.get("content-type") or DEFAULT_REMOTE_CONTENT_TYPE
                    body = await self._read_body(url, response)
        except httpx.TimeoutException as exc:
            logger.warning("Remote fetch of %s timed out", url)
            raise ApiError(
                status_code=400,
                code=ErrorCode.UPSTREAM_FETCH_FAILED,
                message="Failed to fetch: timed out",
            ) from exc

        return RemoteObject(url=url, body=body, content_type=content_type)

    async def _read_body(self, url: str, response: httpx.Response) -> bytes:
        chunks: list[bytes] = []
        received = 0
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if self.max_bytes is not None and received > self.max_bytes:
                logger.warning("Remote fetch of %s exceeded %d bytes", url, self.max_bytes)
                raise ApiError(
                    status_code=400,
                    code=ErrorCode.UPSTREAM_FETCH_FAILED,
                    message=f"Remote object exceeds {self.max_bytes} bytes",
                )
            chunks.append(chunk)
        return b"".join(chunks)
