import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from cdn_gateway.api.routes import objects, upload
from cdn_gateway.core.config import get_settings
from cdn_gateway.core.errors import ApiError, error_content
from cdn_gateway.schemas.objects import HealthResponse

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-API-Key, Authorization",
}

ENDPOINTS = [
    "POST /upload - upload file",
    "POST /upload-base64 - upload base64",
    "POST /upload-url - upload from URL",
    "GET /signed/:key - get temp URL",
    "GET /temp/:key - access via temp URL",
    "GET /:key - direct access",
    "DELETE /:key - delete file",
]

app = FastAPI(title=settings.app_name, version="0.1.0")


@app.middleware("http")
async def request_boundary(request: Request, call_next):
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=CORS_HEADERS)
    try:
        response = await call_next(request)
    except Exception as exc:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        response = JSONResponse(status_code=500, content=error_content(str(exc) or exc.__class__.__name__))
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(ApiError)
async def handle_api_error(_, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


@app.exception_handler(RequestValidationError)
async def handle_validation_error(_, exc: RequestValidationError):
    return JSONResponse(status_code=400, content=error_content("Invalid request"))


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(_, exc: StarletteHTTPException):
    message = "Not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content=error_content(message), headers=exc.headers)


@app.on_event("startup")
def on_startup() -> None:
    if settings.app_env == "production" and settings.has_placeholder_secret():
        raise RuntimeError("SIGNING_SECRET must be set in production")


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy", service=settings.app_name)


@app.get("/")
def index() -> dict:
    return {"service": settings.app_name, "endpoints": ENDPOINTS}


app.include_router(upload.router)
app.include_router(objects.router)


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.app_host, port=settings.app_port)
