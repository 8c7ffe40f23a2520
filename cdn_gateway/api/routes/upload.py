from fastapi import APIRouter, File, Form, UploadFile

from cdn_gateway.api.deps import BaseUrl, Gateway
from cdn_gateway.schemas.objects import Base64UploadRequest, RemoteUploadRequest, UploadResponse

router = APIRouter(tags=["upload"])


@router.post("/upload", response_model=UploadResponse, response_model_exclude_none=True)
async def upload_file(
    gateway: Gateway,
    base_url: BaseUrl,
    file: UploadFile | None = File(default=None),
    folder: str | None = Form(default=None),
    name: str | None = Form(default=None),
) -> UploadResponse:
    data = await file.read() if file is not None else None
    result = await gateway.upload_stream(
        data,
        filename=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
        folder=folder,
        name=name,
        base_url=base_url,
    )
    return UploadResponse(**result)


@router.post("/upload-base64", response_model=UploadResponse, response_model_exclude_none=True)
async def upload_base64(
    payload: Base64UploadRequest,
    gateway: Gateway,
    base_url: BaseUrl,
) -> UploadResponse:
    result = await gateway.upload_base64(
        payload.data,
        filename=payload.filename,
        folder=payload.folder,
        content_type=payload.content_type,
        base_url=base_url,
    )
    return UploadResponse(**result)


@router.post("/upload-url", response_model=UploadResponse, response_model_exclude_none=True)
async def upload_from_url(
    payload: RemoteUploadRequest,
    gateway: Gateway,
    base_url: BaseUrl,
) -> UploadResponse:
    result = await gateway.upload_from_remote(
        payload.url,
        folder=payload.folder,
        filename=payload.filename,
        base_url=base_url,
    )
    return UploadResponse(**result)
