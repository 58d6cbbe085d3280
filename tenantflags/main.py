"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tenantflags.core.config import Settings, get_settings
from tenantflags.core.container import Container, container as default_container
from tenantflags.core.features import (
    FeatureFlagError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from tenantflags.core.logging import configure_logging
from tenantflags.api.dependencies.features import feature_toggle_service_scope
from tenantflags.api.middleware import LoggingMiddleware, RequestIdMiddleware
from tenantflags.api.routes import router as dashboard_router

logger = structlog.get_logger()

ERROR_STATUS_CODES: list[tuple[type[FeatureFlagError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


async def reconcile_on_startup(container: Container, settings: Settings) -> list[str]:
    """
    Run bulk-create-missing once.

    Failures are logged and never stop the application from starting.
    """
    try:
        async with feature_toggle_service_scope(container, settings) as service:
            created = await service.bulk_create_missing()
    except Exception:
        logger.exception("startup.reconciliation_failed")
        return []

    logger.info("startup.reconciliation_done", created=len(created))
    return created


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    settings: Settings = app.state.settings
    container: Container = app.state.container
    uses_database = settings.features.backend == "database"

    # Startup
    if uses_database and settings.database.create_tables:
        await container.database.create_tables()

    if settings.dashboard.create_missing_features_on_start:
        await reconcile_on_startup(container, settings)

    yield

    # Shutdown
    if uses_database:
        await container.database.dispose()


def create_app(
    settings: Settings | None = None,
    container: Container | None = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Defaults to environment-based settings
        container: Providers registered by the host (defaults to the global one).
            Reconfigured from these settings; registered instances are kept.
    """
    settings = settings or get_settings()
    container = container or default_container
    container.configure(settings)
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    app.state.settings = settings
    app.state.container = container

    # Middleware (order matters - last added is outermost)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # Routes
    if settings.dashboard.enable_dashboard:
        app.include_router(dashboard_router, prefix=settings.dashboard_api_prefix)

    # Exception handlers
    @app.exception_handler(FeatureFlagError)
    async def feature_flag_exception_handler(request: Request, exc: FeatureFlagError):
        """Map feature flag errors to HTTP responses."""
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        for error_type, code in ERROR_STATUS_CODES:
            if isinstance(exc, error_type):
                status_code = code
                break

        return JSONResponse(
            status_code=status_code,
            content={"error": exc.code, "message": exc.message},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.exception("request.unhandled_error", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": str(exc) if settings.debug else "An error occurred",
            },
        )

    @app.get("/health")
    async def health_check():
        """Quick health check endpoint (for load balancers)."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
        }

    return app


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "tenantflags.main:create_app",
        factory=True,
        host=_settings.host,
        port=_settings.port,
        reload=_settings.reload,
        workers=_settings.workers,
    )
