"""
Local filesystem object store.

Objects live under ``base_path`` at their key; content type and etag are kept
in a ``.meta`` JSON sidecar next to each file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from starlette.concurrency import run_in_threadpool

from cdn_gateway.services.storage.base import (
    DEFAULT_CONTENT_TYPE,
    ObjectMetadata,
    ObjectStore,
    StoredObject,
    compute_etag,
)

logger = logging.getLogger(__name__)

META_SUFFIX = ".meta"


class LocalObjectStore(ObjectStore):
    """
    Example:
        store = LocalObjectStore(base_path="./uploads")
        await store.put("covers/a.png", png_bytes, "image/png")
        obj = await store.get("covers/a.png")
    """

    def __init__(self, base_path: str = "uploads"):
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _full_path(self, key: str) -> Path:
        path = (self.base_path / key.lstrip("/")).resolve()
        if path != self.base_path and self.base_path not in path.parents:
            raise ValueError(f"Key escapes storage root: {key}")
        return path

    @staticmethod
    def _meta_path(path: Path) -> Path:
        return path.with_name(path.name + META_SUFFIX)

    def _read_metadata(self, key: str, path: Path) -> ObjectMetadata | None:
        if not path.is_file():
            return None
        meta_path = self._meta_path(path)
        meta: dict = {}
        if meta_path.exists():
            meta = json.loads(meta_path.read_text(encoding="utf-8"))
        etag = meta.get("etag") or compute_etag(path.read_bytes())
        return ObjectMetadata(
            key=key,
            size=path.stat().st_size,
            content_type=meta.get("content_type"),
            etag=etag,
        )

    def _put_sync(self, key: str, data: bytes, content_type: str) -> ObjectMetadata:
        path = self._full_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        etag = compute_etag(data)
        path.write_bytes(data)
        self._meta_path(path).write_text(
            json.dumps({"content_type": content_type, "etag": etag}),
            encoding="utf-8",
        )
        logger.debug("Stored %s (%d bytes) at %s", key, len(data), path)
        return ObjectMetadata(key=key, size=len(data), content_type=content_type, etag=etag)

    def _get_sync(self, key: str) -> StoredObject | None:
        path = self._full_path(key)
        metadata = self._read_metadata(key, path)
        if metadata is None:
            return None
        return StoredObject(metadata=metadata, body=path.read_bytes())

    def _delete_sync(self, key: str) -> None:
        path = self._full_path(key)
        path.unlink(missing_ok=True)
        self._meta_path(path).unlink(missing_ok=True)

    async def put(self, key: str, data: bytes, content_type: str = DEFAULT_CONTENT_TYPE) -> ObjectMetadata:
        return await run_in_threadpool(self._put_sync, key, bytes(data), content_type)

    async def get(self, key: str) -> StoredObject | None:
        return await run_in_threadpool(self._get_sync, key)

    async def head(self, key: str) -> ObjectMetadata | None:
        return await run_in_threadpool(self._read_metadata, key, self._full_path(key))

    async def delete(self, key: str) -> None:
        await run_in_threadpool(self._delete_sync, key)
