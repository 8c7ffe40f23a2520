from cdn_gateway.core.config import Settings
from cdn_gateway.services.storage.base import ObjectStore
from cdn_gateway.services.storage.local import LocalObjectStore
from cdn_gateway.services.storage.memory import InMemoryObjectStore


def create_object_store(settings: Settings) -> ObjectStore:
    backend = settings.storage_backend.strip().lower()

    if backend == "memory":
        return InMemoryObjectStore()

    if backend == "local":
        return LocalObjectStore(base_path=settings.local_storage_dir)

    if backend == "oss":
        # oss2 is an optional dependency; only import it when selected
        from cdn_gateway.services.storage.oss import OSSObjectStore

        return OSSObjectStore(
            endpoint=settings.oss_endpoint,
            bucket_name=settings.oss_bucket_name,
            access_key_id=settings.oss_access_key_id,
            access_key_secret=settings.oss_access_key_secret,
            prefix=settings.oss_prefix,
        )

    raise ValueError(f"Unsupported storage backend: {settings.storage_backend}")
