"""
Object gateway: upload, serve, temporary-access and delete flows.

Each upload derives a key, stores the bytes and answers with the public URL
plus a freshly minted temporary URL. Serving never caches content; every read
goes to the object store.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from cdn_gateway.core.error_codes import ErrorCode
from cdn_gateway.core.errors import ApiError
from cdn_gateway.services import authorization
from cdn_gateway.services.authorization import AllowAllAuthorizer, Authorizer
from cdn_gateway.services.capability import AccessOutcome, CapabilityURLService
from cdn_gateway.services.keys import DEFAULT_FOLDER, derive_key, name_from_filename
from cdn_gateway.services.remote import RemoteFetcher
from cdn_gateway.services.storage.base import DEFAULT_CONTENT_TYPE, ObjectStore

logger = logging.getLogger(__name__)

DEFAULT_BASE64_CONTENT_TYPE = "image/png"
CACHE_CONTROL = "public, max-age=31536000, immutable"

_DATA_URL_PREFIX = re.compile(r"^data:([^;]+);base64,")


@dataclass
class ObjectResponse:
    status_code: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


def split_data_url(data: str, fallback_content_type: str | None) -> tuple[str, str]:
    """Return (base64 payload, content type), honouring a ``data:<mime>;base64,`` prefix."""
    match = _DATA_URL_PREFIX.match(data)
    if match:
        return data[match.end():], match.group(1)
    return data, fallback_content_type or DEFAULT_BASE64_CONTENT_TYPE


def decode_base64(payload: str) -> bytes:
    compact = "".join(payload.split())
    compact += "=" * (-len(compact) % 4)
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ApiError(status_code=400, code=ErrorCode.BAD_REQUEST, message="Invalid base64 data") from exc


class ObjectGateway:
    def __init__(
        self,
        store: ObjectStore,
        capabilities: CapabilityURLService,
        fetcher: RemoteFetcher | None = None,
        authorizer: Authorizer | None = None,
        temp_url_ttl_seconds: int = 3600,
        max_temp_url_ttl_seconds: int | None = None,
        default_folder: str = DEFAULT_FOLDER,
    ) -> None:
        self.store = store
        self.capabilities = capabilities
        self.fetcher = fetcher or RemoteFetcher()
        self.authorizer = authorizer or AllowAllAuthorizer()
        self.temp_url_ttl_seconds = temp_url_ttl_seconds
        self.max_temp_url_ttl_seconds = max_temp_url_ttl_seconds
        self.default_folder = default_folder

    def _authorize(self, operation: str, key: str) -> None:
        if not self.authorizer.authorize(operation, key):
            logger.info("Denied %s of %s", operation, key)
            raise ApiError(status_code=403, code=ErrorCode.FORBIDDEN, message="Operation not permitted")

    async def _store_upload(self, key: str, data: bytes, content_type: str, base_url: str) -> dict[str, Any]:
        self._authorize(authorization.UPLOAD, key)
        await self.store.put(key, data, content_type)
        logger.info("Uploaded %s (%d bytes, %s)", key, len(data), content_type)
        return {
            "success": True,
            "key": key,
            "url": f"{base_url}/{key}",
            "temp_url": self.capabilities.mint(key, self.temp_url_ttl_seconds, base_url),
        }

    # ── Uploads ──────────────────────────────────────────────────────────────

    async def upload_stream(
        self,
        data: bytes | None,
        *,
        filename: str | None,
        content_type: str | None,
        folder: str | None,
        name: str | None,
        base_url: str,
    ) -> dict[str, Any]:
        if data is None:
            raise ApiError(status_code=400, code=ErrorCode.BAD_REQUEST, message="No file provided")

        key = derive_key(folder, name, filename, content_type, default_folder=self.default_folder)
        return await self._store_upload(key, data, content_type or DEFAULT_CONTENT_TYPE, base_url)

    async def upload_base64(
        self,
        data: str | None,
        *,
        filename: str | None,
        folder: str | None,
        content_type: str | None,
        base_url: str,
    ) -> dict[str, Any]:
        if not data:
            raise ApiError(status_code=400, code=ErrorCode.BAD_REQUEST, message="No data provided")

        payload, detected_type = split_data_url(data, content_type)
        body = decode_base64(payload)

        key = derive_key(
            folder, name_from_filename(filename), filename, detected_type, default_folder=self.default_folder
        )
        result = await self._store_upload(key, body, detected_type, base_url)
        result["size"] = len(body)
        return result

    async def upload_from_remote(
        self,
        url: str | None,
        *,
        folder: str | None,
        filename: str | None,
        base_url: str,
    ) -> dict[str, Any]:
        if not url:
            raise ApiError(status_code=400, code=ErrorCode.BAD_REQUEST, message="No URL provided")

        remote = await self.fetcher.fetch(url)

        key = derive_key(
            folder, name_from_filename(filename), filename, remote.content_type, default_folder=self.default_folder
        )
        result = await self._store_upload(key, remote.body, remote.content_type, base_url)
        result["size"] = len(remote.body)
        result["source"] = url
        return result

    # ── Reads ────────────────────────────────────────────────────────────────

    async def serve(self, key: str, if_none_match: str | None = None, download: bool = False) -> ObjectResponse:
        if if_none_match:
            head = await self.store.head(key)
            if head is not None and if_none_match == head.etag:
                return ObjectResponse(status_code=304)

        stored = await self.store.get(key)
        if stored is None:
            raise ApiError(status_code=404, code=ErrorCode.NOT_FOUND, message="Not found")

        meta = stored.metadata
        headers = {
            "Content-Type": meta.content_type or DEFAULT_CONTENT_TYPE,
            "Content-Length": str(len(stored.body)),
            "Cache-Control": CACHE_CONTROL,
            "ETag": meta.etag,
        }
        if download:
            filename = key.rsplit("/", 1)[-1]
            headers["Content-Disposition"] = f'attachment; filename="{filename}"'
        return ObjectResponse(status_code=200, body=stored.body, headers=headers)

    async def serve_temporary(self, key: str, expires: str | None, token: str | None) -> ObjectResponse:
        outcome = self.capabilities.verify(key, expires, token)
        if outcome is AccessOutcome.MALFORMED:
            message = "Missing expires or token" if not (expires and token) else "Invalid expires"
            raise ApiError(status_code=400, code=ErrorCode.BAD_REQUEST, message=message)
        if outcome is AccessOutcome.EXPIRED:
            logger.info("Rejected temporary access to %s: expired", key)
            raise ApiError(status_code=403, code=ErrorCode.LINK_EXPIRED, message="Link expired")
        if outcome is AccessOutcome.INVALID:
            logger.info("Rejected temporary access to %s: invalid token", key)
            raise ApiError(status_code=403, code=ErrorCode.INVALID_TOKEN, message="Invalid token")
        return await self.serve(key)

    async def get_signed_url(self, key: str, expires_in: int | None, base_url: str) -> dict[str, Any]:
        ttl = self.temp_url_ttl_seconds if expires_in is None else expires_in
        if self.max_temp_url_ttl_seconds is not None and ttl > self.max_temp_url_ttl_seconds:
            raise ApiError(
                status_code=400,
                code=ErrorCode.BAD_REQUEST,
                message=f"expires_in must not exceed {self.max_temp_url_ttl_seconds}",
            )

        head = await self.store.head(key)
        if head is None:
            raise ApiError(status_code=404, code=ErrorCode.NOT_FOUND, message="File not found")

        return {
            "key": key,
            "url": f"{base_url}/{key}",
            "temp_url": self.capabilities.mint(key, ttl, base_url),
            "expires_in": ttl,
            "size": head.size,
            "content_type": head.content_type,
        }

    # ── Delete ───────────────────────────────────────────────────────────────

    async def delete(self, key: str) -> dict[str, Any]:
        head = await self.store.head(key)
        if head is None:
            raise ApiError(status_code=404, code=ErrorCode.NOT_FOUND, message="File not found")

        self._authorize(authorization.DELETE, key)
        await self.store.delete(key)
        logger.info("Deleted %s", key)
        return {"success": True, "deleted": key}
