from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from cdn_gateway.core.config import get_settings
from cdn_gateway.core.security import TokenCodec
from cdn_gateway.services.capability import CapabilityURLService
from cdn_gateway.services.gateway import ObjectGateway
from cdn_gateway.services.remote import RemoteFetcher
from cdn_gateway.services.storage.factory import create_object_store


@lru_cache(maxsize=1)
def get_gateway() -> ObjectGateway:
    settings = get_settings()
    return ObjectGateway(
        store=create_object_store(settings),
        capabilities=CapabilityURLService(TokenCodec(settings.signing_secret)),
        fetcher=RemoteFetcher(
            timeout_seconds=settings.remote_fetch_timeout_seconds,
            max_bytes=settings.remote_fetch_max_bytes,
        ),
        temp_url_ttl_seconds=settings.temp_url_ttl_seconds,
        max_temp_url_ttl_seconds=settings.max_temp_url_ttl_seconds,
        default_folder=settings.default_folder,
    )


def get_base_url(request: Request) -> str:
    configured = get_settings().public_base_url.rstrip("/")
    if configured:
        return configured
    return f"{request.url.scheme}://{request.url.netloc}"


Gateway = Annotated[ObjectGateway, Depends(get_gateway)]
BaseUrl = Annotated[str, Depends(get_base_url)]
