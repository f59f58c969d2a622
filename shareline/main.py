"""Entry point for the ShareLine service."""

import os
import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from shareline import config
from shareline.database import get_db_connection, init_database
from shareline.exceptions import (
    AuthenticationRequiredError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
    ShareLineException,
    StorageFailureError,
)
from shareline.file_storage import FileStorage
from shareline.schemas.common import ErrorResponse
from shareline.routes.auth_routes import router as auth_router
from shareline.routes.file_routes import router as file_router
from shareline.routes.share_routes import router as share_router

logger = setup_logging('shareline')

app = FastAPI(
    title="ShareLine",
    description="File storage with ownership isolation and capability share links",
    version="1.0.0"
)


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
    user_id = getattr(request.state, 'user_id', None)

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s "
        f"[request_id={request_id}] [user_id={user_id or 'anonymous'}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Initialize database and storage root on application startup.
    """
    logger.info("ShareLine service starting up...")

    init_database()
    logger.info("Database initialized")

    storage = FileStorage()
    logger.info(f"Storage root ready at {storage.root}")


def _error_response(exc: Exception, status_code: int, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(detail=str(exc), code=code).model_dump())


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(f"Invalid input: {exc} [request_id={request_id}] path={request.url.path}")
    return _error_response(exc, status.HTTP_400_BAD_REQUEST, "INVALID_INPUT")


@app.exception_handler(AuthenticationRequiredError)
async def authentication_required_handler(request: Request, exc: AuthenticationRequiredError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(f"Authentication required: {exc} [request_id={request_id}] path={request.url.path}")
    return _error_response(exc, status.HTTP_401_UNAUTHORIZED, "AUTHENTICATION_REQUIRED")


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    user_id = getattr(request.state, 'user_id', None)
    logger.warning(
        f"Not found: {exc} [request_id={request_id}] [user_id={user_id or 'anonymous'}] path={request.url.path}"
    )
    return _error_response(exc, status.HTTP_404_NOT_FOUND, "NOT_FOUND")


@app.exception_handler(StorageFailureError)
async def storage_failure_handler(request: Request, exc: StorageFailureError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Storage failure: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=exc
    )
    return _error_response(exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "STORAGE_FAILURE")


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(f"Unresolved conflict: {exc} [request_id={request_id}] path={request.url.path}")
    return _error_response(exc, status.HTTP_409_CONFLICT, "CONFLICT")


@app.exception_handler(ShareLineException)
async def shareline_exception_handler(request: Request, exc: ShareLineException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"ShareLine exception: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=exc
    )
    return _error_response(exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR")


app.include_router(auth_router)
app.include_router(file_router)
app.include_router(share_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "ShareLine API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Liveness check. Returns 200 if the service is alive.
    """
    return {"status": "healthy", "service": "shareline"}


@app.get("/ready")
async def ready_check():
    """
    Readiness check.
    Verifies database connectivity and that the storage root is writable.
    """
    try:
        with get_db_connection() as conn:
            conn.execute("SELECT 1")
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    try:
        root = FileStorage().root
        storage_status = "ok" if os.access(root, os.W_OK) else "error: storage root not writable"
    except Exception as e:
        storage_status = f"error: {str(e)}"

    ready = db_status == "ok" and storage_status == "ok"
    status_code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=status_code,
        content={
            "ready": ready,
            "database": db_status,
            "storage": storage_status
        }
    )


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "shareline.main:app",
        host=config.SHARELINE_HOST,
        port=config.SHARELINE_PORT,
    )


if __name__ == "__main__":
    main()
