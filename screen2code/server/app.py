"""
FastAPI application exposing the screenshot conversion endpoint.
"""

import logging
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from screen2code import __version__
from screen2code.config import Settings, get_settings
from screen2code.errors import (
    GenerationError,
    MissingImageError,
    Screen2CodeError,
    UploadTooLargeError,
)
from screen2code.models import ConvertResponse, HealthResponse, ImageUpload
from screen2code.pipeline.generation import ScreenshotConverter

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024

# Room for boundaries and part headers on top of the file itself
MULTIPART_OVERHEAD = 64 * 1024

router = APIRouter(prefix="/api", tags=["convert"])


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_converter(settings: Settings = Depends(get_app_settings)) -> ScreenshotConverter:
    """Build a fresh converter for each request."""
    return ScreenshotConverter(settings=settings)


def read_upload(file: UploadFile, max_bytes: int) -> ImageUpload:
    """
    Read an uploaded file into memory, stopping once it exceeds the limit.

    Args:
        file: Multipart file part.
        max_bytes: Largest accepted size.

    Returns:
        ImageUpload with the file's bytes and declared media type.
    """
    chunks = []
    total = 0
    while True:
        chunk = file.file.read(_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise UploadTooLargeError.for_limit(max_bytes)
        chunks.append(chunk)

    return ImageUpload(
        filename=file.filename or "upload",
        media_type=file.content_type or "application/octet-stream",
        data=b"".join(chunks),
    )


@router.get("/health", response_model=HealthResponse)
def health(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    return HealthResponse(model=settings.gemini_model, configured=settings.has_credentials)


@router.post(
    "/convert",
    response_model=ConvertResponse,
    responses={400: {"description": "Bad upload"}, 413: {"description": "Upload too large"}},
)
def convert(
    image: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_app_settings),
    converter: ScreenshotConverter = Depends(get_converter),
) -> ConvertResponse:
    if image is None:
        raise MissingImageError()

    # Runs in the threadpool: the model call blocks until Gemini answers
    request_id = uuid4().hex[:12]
    try:
        upload = read_upload(image, settings.max_upload_bytes)
        result = converter.convert(upload, request_id=request_id)
    except Screen2CodeError:
        raise
    except Exception as e:
        logger.exception("Conversion %s failed", request_id)
        raise GenerationError(str(e)) from e

    logger.info(
        "Conversion %s done: %s, %d bytes in, %d chars out",
        request_id, upload.media_type, upload.size, len(result.html),
    )
    return ConvertResponse(html=result.html)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def handle_conversion_error(request: Request, exc: Screen2CodeError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Conversion error: %s", exc.message)
    else:
        logger.info("Rejected upload: %s", exc.message)
    return _error_response(exc.status_code, exc.message)


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return _error_response(400, message)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error_response(500, str(exc) or GenerationError.default_message)


async def reject_oversized_body(request: Request, call_next):
    """Answer 413 from Content-Length alone, before the multipart body is parsed."""
    if request.method == "POST" and request.url.path == "/api/convert":
        max_bytes = request.app.state.settings.max_upload_bytes
        try:
            declared = int(request.headers.get("content-length", ""))
        except ValueError:
            declared = None
        if declared is not None and declared > max_bytes + MULTIPART_OVERHEAD:
            logger.info("Rejected upload: Content-Length %d over limit", declared)
            return _error_response(413, UploadTooLargeError.for_limit(max_bytes).message)
    return await call_next(request)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create the API application.

    Args:
        settings: Settings to serve with (loaded from the environment if omitted).

    Returns:
        Configured FastAPI app.
    """
    settings = settings or get_settings()

    app = FastAPI(title="Screenshot to Code API", version=__version__)
    app.state.settings = settings

    # Added first so CORS headers still wrap its 413
    app.middleware("http")(reject_oversized_body)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(Screen2CodeError, handle_conversion_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(router)

    if not settings.has_credentials:
        logger.warning("GEMINI_API_KEY is not set; /api/convert will answer 500")

    return app
