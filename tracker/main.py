"""Entry point for the tracker service."""

import time
import uuid
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.exceptions import NotFoundError, P2PShareError, ValidationError
from common.logging_config import setup_logging
from tracker.config import TRACKER_HOST, TRACKER_PORT, TRACKER_RELOAD
from tracker.registry import Registry
from tracker.routes import registry_router

logger = setup_logging('tracker')


async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
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


async def validation_error_handler(request: Request, exc: ValidationError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Validation error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "code": exc.code}
    )


async def not_found_handler(request: Request, exc: NotFoundError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.info(
        f"Not found: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc), "code": "PEER_NOT_FOUND"}
    )


async def p2pshare_error_handler(request: Request, exc: P2PShareError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Tracker error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "code": "INTERNAL_ERROR"}
    )


def create_app(registry: Optional[Registry] = None) -> FastAPI:
    """
    Build the tracker application around a registry.

    Args:
        registry: Registry to serve; a fresh empty one when omitted

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="p2pshare Tracker",
        description="Directory of peers, their shared files and listener addresses",
        version="1.0.0"
    )
    app.state.registry = registry if registry is not None else Registry()

    app.middleware("http")(log_requests)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(P2PShareError, p2pshare_error_handler)

    app.include_router(registry_router)

    @app.on_event("startup")
    async def startup_event():
        logger.info("Tracker service starting up...")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Tracker service shutting down, registry state is discarded")

    @app.get("/")
    async def root():
        """
        Root endpoint for health check.
        """
        return {"message": "p2pshare Tracker API", "status": "running"}

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint.
        Returns 200 if service is alive.
        """
        return {"status": "healthy", "service": "tracker"}

    return app


app = create_app()


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "tracker.main:app",
        host=TRACKER_HOST,
        port=TRACKER_PORT,
        reload=TRACKER_RELOAD
    )


if __name__ == "__main__":
    main()
