"""FastAPI application entrypoint for the credit application system.

Run locally with:

    uvicorn main:app --reload
"""
import time
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from credit_system.api.dependencies import Services, build_services
from credit_system.api.exception_handlers import build_error_response, register_exception_handlers
from credit_system.api.routes import credits_router, customers_router
from credit_system.core.config import Settings, settings as default_settings
from credit_system.core.logging import get_logger, setup_logging

logger = get_logger(__name__)

# Application metadata
APP_VERSION = "1.0.0"
APP_NAME = "Credit Application System"


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        settings: Settings to use (defaults to the environment-loaded ones)
        services: Pre-built services; built from `settings` when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or default_settings

    app = FastAPI(
        title=APP_NAME,
        description="Customers and their credit requests",
        version=APP_VERSION,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )
    app.state.settings = settings
    app.state.services = services or build_services(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log every request with timing and status code."""
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={"request_id": request_id, "method": request.method, "path": request.url.path}
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": round(duration_ms, 2),
                    "error_type": type(e).__name__,
                },
                exc_info=True
            )
            response = build_error_response(e)
            response.headers["X-Request-ID"] = request_id
            return response

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Request completed: {request.method} {request.url.path}",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            }
        )
        response.headers["X-Request-ID"] = request_id
        return response

    register_exception_handlers(app)
    app.include_router(customers_router, prefix=settings.api_prefix)
    app.include_router(credits_router, prefix=settings.api_prefix)

    @app.get("/")
    def root():
        """Root endpoint with basic service info."""
        return {
            "service": APP_NAME,
            "version": APP_VERSION,
            "status": "running",
            "environment": settings.environment
        }

    @app.get("/health")
    def health_check():
        """Liveness probe."""
        return {
            "status": "healthy",
            "version": APP_VERSION,
            "checks": {"api": "ok", "storage": settings.storage_backend}
        }

    logger.info("Application configured", extra={"operation": "startup"})
    return app


# Initialize structured logging
setup_logging(level=default_settings.log_level, json_format=default_settings.environment == "production")

app = create_app()
