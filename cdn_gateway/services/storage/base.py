"""
Object store contract used by the gateway.

Every operation is individually atomic; there are no cross-key transactions,
so concurrent writers to one key race with last-writer-wins.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from dataclasses import dataclass

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class ObjectMetadata:
    key: str
    size: int
    content_type: str | None
    etag: str


@dataclass(frozen=True)
class StoredObject:
    metadata: ObjectMetadata
    body: bytes


def compute_etag(data: bytes) -> str:
    return f'"{hashlib.md5(data).hexdigest()}"'


class ObjectStore(ABC):
    """
    Abstract base class for object storage backends.

    Missing keys are reported as ``None`` from ``get`` and ``head``; backend
    failures propagate as exceptions.
    """

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str = DEFAULT_CONTENT_TYPE) -> ObjectMetadata:
        """
        Store an object, replacing any existing object under ``key``.

        Args:
            key: Object key (e.g., "covers/5f0c....png")
            data: Object contents
            content_type: MIME type recorded with the object

        Returns:
            Metadata of the stored object, including its etag
        """

    @abstractmethod
    async def get(self, key: str) -> StoredObject | None:
        """Return the object body and metadata, or None if absent."""

    @abstractmethod
    async def head(self, key: str) -> ObjectMetadata | None:
        """Return object metadata without the body, or None if absent."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the object. Deleting a missing key is a no-op."""
