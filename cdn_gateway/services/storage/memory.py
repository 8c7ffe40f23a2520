from __future__ import annotations

from cdn_gateway.services.storage.base import (
    DEFAULT_CONTENT_TYPE,
    ObjectMetadata,
    ObjectStore,
    StoredObject,
    compute_etag,
)


class InMemoryObjectStore(ObjectStore):
    """Dict-backed store for development and tests. Contents are lost on restart."""

    def __init__(self) -> None:
        self._objects: dict[str, StoredObject] = {}

    async def put(self, key: str, data: bytes, content_type: str = DEFAULT_CONTENT_TYPE) -> ObjectMetadata:
        body = bytes(data)
        metadata = ObjectMetadata(key=key, size=len(body), content_type=content_type, etag=compute_etag(body))
        self._objects[key] = StoredObject(metadata=metadata, body=body)
        return metadata

    async def get(self, key: str) -> StoredObject | None:
        return self._objects.get(key)

    async def head(self, key: str) -> ObjectMetadata | None:
        stored = self._objects.get(key)
        return stored.metadata if stored else None

    async def delete(self, key: str) -> None:
        self._objects.pop(key, None)

    def __len__(self) -> int:
        return len(self._objects)
