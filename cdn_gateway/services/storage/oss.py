"""
Alibaba Cloud OSS object store.
"""

from __future__ import annotations

import logging

import oss2
from starlette.concurrency import run_in_threadpool

from cdn_gateway.services.storage.base import (
    DEFAULT_CONTENT_TYPE,
    ObjectMetadata,
    ObjectStore,
    StoredObject,
)

logger = logging.getLogger(__name__)


def _quote_etag(etag: str | None) -> str:
    value = (etag or "").strip('"')
    return f'"{value}"'


class OSSObjectStore(ObjectStore):
    """
    OSS-backed store with an optional key prefix.

    Example:
        store = OSSObjectStore(
            endpoint="oss-cn-shanghai.aliyuncs.com",
            bucket_name="my-bucket",
            access_key_id="...",
            access_key_secret="...",
            prefix="cdn/",
        )
    """

    def __init__(
        self,
        endpoint: str = "",
        bucket_name: str = "",
        access_key_id: str = "",
        access_key_secret: str = "",
        prefix: str = "",
        bucket=None,
    ):
        self.prefix = prefix
        if bucket is not None:
            self._bucket = bucket
            return

        if not (endpoint and bucket_name):
            raise RuntimeError("OSS endpoint and bucket name must be configured")
        if not (access_key_id and access_key_secret):
            raise RuntimeError("OSS credentials are not configured")
        if not endpoint.startswith(("http://", "https://")):
            endpoint = f"https://{endpoint}"

        auth = oss2.Auth(access_key_id, access_key_secret)
        self._bucket = oss2.Bucket(auth, endpoint, bucket_name)

    def _full_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _put_sync(self, key: str, data: bytes, content_type: str) -> ObjectMetadata:
        full_key = self._full_key(key)
        try:
            result = self._bucket.put_object(full_key, data, headers={"Content-Type": content_type})
        except oss2.exceptions.OssError:
            logger.error("Error uploading to OSS %s", full_key)
            raise
        if not (200 <= int(getattr(result, "status", 500)) < 300):
            raise RuntimeError(f"Failed to upload {full_key} to OSS")
        return ObjectMetadata(
            key=key,
            size=len(data),
            content_type=content_type,
            etag=_quote_etag(result.etag),
        )

    def _get_sync(self, key: str) -> StoredObject | None:
        full_key = self._full_key(key)
        try:
            result = self._bucket.get_object(full_key)
        except oss2.exceptions.NotFound:
            return None
        body = result.read()
        metadata = ObjectMetadata(
            key=key,
            size=len(body),
            content_type=result.content_type,
            etag=_quote_etag(result.etag),
        )
        return StoredObject(metadata=metadata, body=body)

    def _head_sync(self, key: str) -> ObjectMetadata | None:
        try:
            result = self._bucket.head_object(self._full_key(key))
        except oss2.exceptions.NotFound:
            return None
        return ObjectMetadata(
            key=key,
            size=int(result.content_length or 0),
            content_type=result.content_type,
            etag=_quote_etag(result.etag),
        )

    async def put(self, key: str, data: bytes, content_type: str = DEFAULT_CONTENT_TYPE) -> ObjectMetadata:
        return await run_in_threadpool(self._put_sync, key, bytes(data), content_type)

    async def get(self, key: str) -> StoredObject | None:
        return await run_in_threadpool(self._get_sync, key)

    async def head(self, key: str) -> ObjectMetadata | None:
        return await run_in_threadpool(self._head_sync, key)

    async def delete(self, key: str) -> None:
        await run_in_threadpool(self._bucket.delete_object, self._full_key(key))
