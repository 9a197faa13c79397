"""Entry point for the ChatVault server."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.logging_config import setup_logging
from server.config import SERVER_HOST, SERVER_PORT
from server.database import init_database
from server.routes.auth_routes import router as auth_router
from server.routes.transfer_routes import router as transfer_router
from server.routes.transfer_routes import blob_router
from server.schemas.common import ErrorResponse
from server.service_locator import close_blob_store
from server.exceptions import (
    ChatVaultError,
    InvalidInputError,
    UserAlreadyExistsError,
    InvalidCredentialsError,
    InvalidAPIKeyError,
    AccessDeniedError,
    BlobNotFoundError,
    ChecksumMismatchError,
    BlobStoreUnavailableError,
    BlobTooLargeError,
    RecordStoreError,
)

logger = setup_logging('server')

app = FastAPI(
    title="ChatVault",
    description="File storage on top of a chat platform's document store",
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
    logger.info("ChatVault server starting up...")
    init_database()
    logger.info("Database initialized")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("ChatVault server shutting down...")
    await close_blob_store()
    logger.info("Blob store client closed")


def _error_response(request: Request, exc: ChatVaultError, status_code: int, severe: bool = False) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    user_id = getattr(request.state, 'user_id', 'anonymous')
    message = (
        f"{type(exc).__name__}: {exc} [request_id={request_id}] "
        f"[user_id={user_id}] path={request.url.path}"
    )
    if severe:
        logger.error(message, exc_info=True)
    else:
        logger.warning(message)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc), code=exc.code).model_dump()
    )


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST)


@app.exception_handler(UserAlreadyExistsError)
async def user_already_exists_handler(request: Request, exc: UserAlreadyExistsError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST)


@app.exception_handler(InvalidCredentialsError)
async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
    return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED)


@app.exception_handler(InvalidAPIKeyError)
async def invalid_api_key_handler(request: Request, exc: InvalidAPIKeyError):
    return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED)


@app.exception_handler(AccessDeniedError)
async def access_denied_handler(request: Request, exc: AccessDeniedError):
    return _error_response(request, exc, status.HTTP_403_FORBIDDEN)


@app.exception_handler(BlobNotFoundError)
async def chunk_not_found_handler(request: Request, exc: BlobNotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, severe=True)


@app.exception_handler(ChecksumMismatchError)
async def checksum_mismatch_handler(request: Request, exc: ChecksumMismatchError):
    return _error_response(request, exc, status.HTTP_502_BAD_GATEWAY, severe=True)


@app.exception_handler(BlobTooLargeError)
async def blob_too_large_handler(request: Request, exc: BlobTooLargeError):
    return _error_response(request, exc, status.HTTP_502_BAD_GATEWAY, severe=True)


@app.exception_handler(BlobStoreUnavailableError)
async def blob_store_unavailable_handler(request: Request, exc: BlobStoreUnavailableError):
    return _error_response(request, exc, status.HTTP_503_SERVICE_UNAVAILABLE, severe=True)


@app.exception_handler(RecordStoreError)
async def record_store_handler(request: Request, exc: RecordStoreError):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, severe=True)


@app.exception_handler(ChatVaultError)
async def chatvault_error_handler(request: Request, exc: ChatVaultError):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, severe=True)


app.include_router(auth_router)
app.include_router(transfer_router)
app.include_router(blob_router)


@app.get("/")
async def root():
    return {"message": "ChatVault API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Liveness endpoint. Returns 200 if the process is serving requests.
    """
    return {"status": "healthy", "service": "chatvault"}


@app.get("/ready")
async def ready_check():
    """
    Readiness check endpoint.
    Verifies database and blob store connectivity.
    """
    from server.database import get_db_connection
    from server.service_locator import get_blob_store

    try:
        with get_db_connection() as conn:
            conn.execute("SELECT 1")
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    try:
        blob_store_status = "ok" if await get_blob_store().ping() else "error: ping failed"
    except Exception as e:
        blob_store_status = f"error: {str(e)}"

    ready = db_status == "ok" and blob_store_status == "ok"
    status_code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=status_code,
        content={
            "ready": ready,
            "database": db_status,
            "blob_store": blob_store_status
        }
    )


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
