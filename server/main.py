"""Entry point for the storage server."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from common.logging_config import request_id_var, setup_logging
from server.blob_store import BlobStore
from server.config import SERVER_HOST, SERVER_PORT
from server.database import init_database
from server.exceptions import (
    TagvaultException,
    RecordNotFoundError,
    BlobUnavailableError,
    MetadataWriteError,
    InvalidUploadError,
    MalformedArchiveError,
    EmptyManifestError,
)
from server.routes.backup_routes import router as backup_router
from server.routes.file_routes import router as file_router
from server.schemas.common import ErrorResponse

logger = setup_logging('server')

app = FastAPI(
    title="Tagvault Storage Server",
    description="Single-node tagged file storage with archive backup and restore",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Origin", "Content-Type"],
    expose_headers=["Content-Length", "Content-Disposition"],
    max_age=12 * 60 * 60,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Tag the request with an id (client-supplied X-Request-ID or a new uuid)
    and log its start, completion and duration.
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    token = request_id_var.set(request_id)
    start_time = time.time()

    try:
        logger.info(f"Request started: {request.method} {request.url.path}")
        response = await call_next(request)
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={time.time() - start_time:.3f}s"
        )
    finally:
        request_id_var.reset(token)

    response.headers["X-Request-ID"] = request_id
    return response


@app.on_event("startup")
async def startup_event():
    """
    Initialize database and blob directory on application startup.
    """
    logger.info("Storage server starting up...")

    init_database()
    logger.info("Database initialized")

    BlobStore().ensure_directory()
    logger.info("Blob storage directory ready")


def _error_response(request: Request, exc: Exception, status_code: int, code: str) -> JSONResponse:
    message = f"{type(exc).__name__}: {exc} path={request.url.path}"
    if status_code >= 500:
        logger.error(message, exc_info=True)
    else:
        logger.warning(message)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc), code=code).model_dump()
    )


@app.exception_handler(InvalidUploadError)
async def invalid_upload_handler(request: Request, exc: InvalidUploadError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_UPLOAD")


@app.exception_handler(MalformedArchiveError)
async def malformed_archive_handler(request: Request, exc: MalformedArchiveError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "MALFORMED_ARCHIVE")


@app.exception_handler(EmptyManifestError)
async def empty_manifest_handler(request: Request, exc: EmptyManifestError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "EMPTY_MANIFEST")


@app.exception_handler(RecordNotFoundError)
async def record_not_found_handler(request: Request, exc: RecordNotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "FILE_NOT_FOUND")


@app.exception_handler(BlobUnavailableError)
async def blob_unavailable_handler(request: Request, exc: BlobUnavailableError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "BLOB_NOT_FOUND")


@app.exception_handler(MetadataWriteError)
async def metadata_write_handler(request: Request, exc: MetadataWriteError):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "METADATA_WRITE_FAILED")


@app.exception_handler(TagvaultException)
async def tagvault_exception_handler(request: Request, exc: TagvaultException):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR")


app.include_router(file_router)
app.include_router(backup_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "Tagvault Storage API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint for container healthchecks.
    """
    return {"status": "healthy", "service": "server"}


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "server.main:app",
        host=SERVER_HOST,
        port=SERVER_PORT,
    )


if __name__ == "__main__":
    main()
