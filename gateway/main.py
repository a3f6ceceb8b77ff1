"""Entry point for the share gateway service."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.exceptions import (
    NotFoundError,
    ServiceUnavailableError,
    ShareUnavailableError,
    VaultError,
)
from common.logging_config import setup_logging
from gateway.config import GATEWAY_HOST, GATEWAY_PORT
from gateway.routes import close_resolver, router as share_router

logger = setup_logging('gateway')

STORAGE_ERROR_MESSAGE = "The storage service could not complete the request."

app = FastAPI(
    title="FileVault Share Gateway",
    description="Public endpoints behind <origin>/share/<fileId> links",
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

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("shutdown")
async def shutdown_event():
    """
    Close the storage client on application shutdown.
    """
    logger.info("Share gateway shutting down...")
    await close_resolver()


@app.exception_handler(NotFoundError)
async def share_unavailable_handler(request: Request, exc: NotFoundError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.info(
        f"Share unavailable: {exc} [request_id={request_id}] path={request.url.path}"
    )
    message = exc.message if isinstance(exc, ShareUnavailableError) else ShareUnavailableError.DEFAULT_MESSAGE
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": message, "code": "SHARE_UNAVAILABLE"}
    )


@app.exception_handler(ServiceUnavailableError)
async def service_unavailable_handler(request: Request, exc: ServiceUnavailableError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Storage service unavailable: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage service is currently unavailable. Please try again later.",
                 "code": "SERVICE_UNAVAILABLE"}
    )


@app.exception_handler(VaultError)
async def vault_error_handler(request: Request, exc: VaultError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Storage error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": STORAGE_ERROR_MESSAGE, "code": "STORAGE_ERROR"}
    )


app.include_router(share_router)


@app.get("/")
async def root():
    """
    Health check endpoint.
    """
    return {"status": "running", "service": "FileVault Share Gateway"}


def main() -> None:
    logger.info(f"Starting share gateway on {GATEWAY_HOST}:{GATEWAY_PORT}")
    uvicorn.run(app, host=GATEWAY_HOST, port=GATEWAY_PORT)


if __name__ == "__main__":
    main()
