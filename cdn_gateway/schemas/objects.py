from pydantic import BaseModel


class Base64UploadRequest(BaseModel):
    data: str | None = None
    filename: str | None = None
    folder: str | None = None
    content_type: str | None = None


class RemoteUploadRequest(BaseModel):
    url: str | None = None
    folder: str | None = None
    filename: str | None = None


class UploadResponse(BaseModel):
    success: bool
    key: str
    url: str
    temp_url: str
    size: int | None = None
    source: str | None = None


class SignedUrlResponse(BaseModel):
    key: str
    url: str
    temp_url: str
    expires_in: int
    size: int
    content_type: str | None = None


class DeleteResponse(BaseModel):
    success: bool
    deleted: str


class HealthResponse(BaseModel):
    status: str
    service: str
