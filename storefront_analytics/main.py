"""
FastAPI Application

Main entry point for the Storefront Admin Analytics API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from storefront_analytics.config import get_settings
from storefront_analytics.config.logging import configure_logging
from storefront_analytics.exceptions import AnalyticsError
from storefront_analytics.serving.api.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
)
from storefront_analytics.serving.api.routes import (
    analytics_router,
    dashboard_router,
    health_router,
    promotions_router,
    reviews_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()
    logger.info("Starting Storefront Analytics API", version=app.version)
    yield
    logger.info("Shutting down...")


async def analytics_error_handler(request: Request, exc: AnalyticsError) -> JSONResponse:
    """Reject requests whose data the reporting layer refuses."""
    logger.warning(
        "Request rejected",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse(status_code=422, content=exc.to_dict())


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Storefront Analytics API",
        description="Reporting and aggregation for the storefront back-office",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.security.rate_limit_requests,
        window_seconds=settings.security.rate_limit_window_seconds,
    )

    app.add_exception_handler(AnalyticsError, analytics_error_handler)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(analytics_router, prefix="/api/v1/analytics", tags=["Analytics"])
    app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["Dashboard"])
    app.include_router(promotions_router, prefix="/api/v1/promotions", tags=["Promotions"])
    app.include_router(reviews_router, prefix="/api/v1/reviews", tags=["Reviews"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": "Storefront Analytics API",
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": "/docs" if settings.is_development else None,
        }

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with the configured host and port."""
    import uvicorn
    settings = get_settings()
    uvicorn.run(
        "storefront_analytics.main:app",
        host=settings.api_host,
        port=settings.api_port,
        workers=1 if settings.is_development else settings.api_workers,
    )


if __name__ == "__main__":
    run()
