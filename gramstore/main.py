"""Entry point for the storage service."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from gramstore.cleanup_task import StaleUploadSweeper
from gramstore.config import SERVICE_HOST, SERVICE_PORT
from gramstore.database import get_db_connection, init_database
from gramstore.exceptions import (
    ChunkUploadFailedError,
    CorruptFileError,
    FileNotFoundError,
    FolderNotFoundError,
    GramStoreException,
    IncompleteUploadError,
    InvalidChunkError,
    InvalidFileError,
    InvalidOperationError,
    MergeFailedError,
    MissingChunksError,
    RemoteRejectedError,
    RemoteUnavailableError,
    SizeLimitExceededError,
)
from gramstore.routes.file_routes import router as file_router
from gramstore.routes.folder_routes import router as folder_router
from gramstore.schemas.common import ErrorResponse
from gramstore.telegram_client import TelegramBlobStore

logger = setup_logging('gramstore')

app = FastAPI(
    title="CloudGram Store",
    description="File storage service backed by Telegram chat documents",
    version="1.0.0"
)

sweeper = StaleUploadSweeper()


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(f"Request started: {request.method} {request.url.path} [request_id={request_id}]")

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Initialize database and start the stale upload sweeper.
    """
    logger.info("Storage service starting up...")

    init_database()
    logger.info("Database initialized")

    await sweeper.start()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Storage service shutting down...")
    await sweeper.stop()


def _error_response(request: Request, exc: Exception, status_code: int, code: str, level: str = "warning"):
    request_id = getattr(request.state, 'request_id', 'unknown')
    message = f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}"
    if level == "error":
        logger.error(message, exc_info=True)
    else:
        logger.warning(message)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc), code=code).model_dump()
    )


@app.exception_handler(FileNotFoundError)
async def file_not_found_handler(request: Request, exc: FileNotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "FILE_NOT_FOUND")


@app.exception_handler(FolderNotFoundError)
async def folder_not_found_handler(request: Request, exc: FolderNotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "FOLDER_NOT_FOUND")


@app.exception_handler(InvalidFileError)
async def invalid_file_handler(request: Request, exc: InvalidFileError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_FILE")


@app.exception_handler(InvalidChunkError)
async def invalid_chunk_handler(request: Request, exc: InvalidChunkError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_CHUNK")


@app.exception_handler(InvalidOperationError)
async def invalid_operation_handler(request: Request, exc: InvalidOperationError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_OPERATION")


@app.exception_handler(SizeLimitExceededError)
async def size_limit_handler(request: Request, exc: SizeLimitExceededError):
    return _error_response(request, exc, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "SIZE_LIMIT_EXCEEDED")


@app.exception_handler(IncompleteUploadError)
async def incomplete_upload_handler(request: Request, exc: IncompleteUploadError):
    return _error_response(request, exc, status.HTTP_409_CONFLICT, "INCOMPLETE_UPLOAD")


@app.exception_handler(ChunkUploadFailedError)
async def chunk_upload_failed_handler(request: Request, exc: ChunkUploadFailedError):
    return _error_response(request, exc, status.HTTP_502_BAD_GATEWAY, "CHUNK_UPLOAD_FAILED", level="error")


@app.exception_handler(MergeFailedError)
async def merge_failed_handler(request: Request, exc: MergeFailedError):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "MERGE_FAILED", level="error")


@app.exception_handler(MissingChunksError)
async def missing_chunks_handler(request: Request, exc: MissingChunksError):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "MISSING_CHUNKS", level="error")


@app.exception_handler(CorruptFileError)
async def corrupt_file_handler(request: Request, exc: CorruptFileError):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "CORRUPT_FILE", level="error")


@app.exception_handler(RemoteUnavailableError)
async def remote_unavailable_handler(request: Request, exc: RemoteUnavailableError):
    return _error_response(request, exc, status.HTTP_503_SERVICE_UNAVAILABLE, "REMOTE_UNAVAILABLE", level="error")


@app.exception_handler(RemoteRejectedError)
async def remote_rejected_handler(request: Request, exc: RemoteRejectedError):
    return _error_response(request, exc, status.HTTP_502_BAD_GATEWAY, "REMOTE_REJECTED", level="error")


@app.exception_handler(GramStoreException)
async def gramstore_exception_handler(request: Request, exc: GramStoreException):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", level="error")


app.include_router(file_router)
app.include_router(folder_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "CloudGram Store API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Liveness probe. Returns 200 if the process is serving requests.
    """
    return {"status": "healthy", "service": "gramstore"}


@app.get("/ready")
async def ready_check():
    """
    Readiness check endpoint.
    Verifies database access and that the bot token is accepted by Telegram.
    """
    try:
        with get_db_connection() as conn:
            conn.execute("SELECT 1")
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    blob_store = TelegramBlobStore()
    try:
        telegram_status = "ok" if await blob_store.test_connection() else "error: connection test failed"
    finally:
        await blob_store.close()

    ready = db_status == "ok" and telegram_status == "ok"
    status_code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=status_code,
        content={
            "ready": ready,
            "database": db_status,
            "telegram": telegram_status
        }
    )


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "gramstore.main:app",
        host=SERVICE_HOST,
        port=SERVICE_PORT,
    )


if __name__ == "__main__":
    main()
