"""Object read, temporary-access and delete endpoints.

Registered last: ``/{key:path}`` matches every remaining path.
"""

from fastapi import APIRouter, Header, Query, Response

from cdn_gateway.api.deps import BaseUrl, Gateway
from cdn_gateway.schemas.objects import DeleteResponse, SignedUrlResponse
from cdn_gateway.services.gateway import ObjectResponse

router = APIRouter(tags=["objects"])


def _to_response(result: ObjectResponse) -> Response:
    return Response(content=result.body, status_code=result.status_code, headers=result.headers)


@router.get("/signed/{key:path}", response_model=SignedUrlResponse)
async def get_signed_url(
    key: str,
    gateway: Gateway,
    base_url: BaseUrl,
    expires_in: int | None = Query(default=None),
) -> SignedUrlResponse:
    result = await gateway.get_signed_url(key, expires_in, base_url)
    return SignedUrlResponse(**result)


@router.get("/temp/{key:path}")
async def temp_access(
    key: str,
    gateway: Gateway,
    expires: str | None = Query(default=None),
    token: str | None = Query(default=None),
) -> Response:
    return _to_response(await gateway.serve_temporary(key, expires, token))


@router.get("/{key:path}")
async def serve_object(
    key: str,
    gateway: Gateway,
    download: str | None = Query(default=None),
    if_none_match: str | None = Header(default=None),
) -> Response:
    result = await gateway.serve(key, if_none_match=if_none_match, download=download == "true")
    return _to_response(result)


@router.delete("/{key:path}", response_model=DeleteResponse)
async def delete_object(key: str, gateway: Gateway) -> DeleteResponse:
    result = await gateway.delete(key)
    return DeleteResponse(**result)
