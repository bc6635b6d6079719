"""
FastAPI application entry point.

This is the main application that ties together all components:
- API routes for business metrics and activity history
- Database lifecycle management
- CORS configuration for frontend access
- Error handling and logging
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bizmetrics import __version__
from bizmetrics.api.routes import health, metrics
from bizmetrics.config import get_settings
from bizmetrics.domain.currency import UnknownCurrencyError
from bizmetrics.infrastructure.database import close_db, init_db
from bizmetrics.infrastructure.repository import DataStoreUnavailableError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown tasks:
    - Initialize database tables
    - Dispose of the connection pool on shutdown
    """
    settings = get_settings()

    logger.info(f"Starting business metrics v{__version__}")
    logger.info(f"Reporting currency: {settings.reporting_currency}")
    logger.info(f"Reporting timezone: {settings.reporting_timezone}")
    logger.info(f"Debug mode: {settings.debug}")

    # Initialize database
    try:
        await init_db()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        # Continue anyway; requests will report the data store as unavailable

    yield  # Application runs here

    # Shutdown
    logger.info("Shutting down business metrics")
    await close_db()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance ready to serve requests.
    """
    settings = get_settings()
    logging.getLogger("bizmetrics").setLevel(settings.log_level)

    app = FastAPI(
        title="Business Metrics API",
        description=(
            "Revenue, customer growth and activity feeds for business accounts.\n\n"
            "All revenue is reported in a single configured currency."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health.router)
    app.include_router(metrics.router, prefix="/api/v1")

    def _detail(exc: Exception, fallback: str) -> str:
        # Don't expose internal errors in production
        return str(exc) if settings.debug else fallback

    @app.exception_handler(UnknownCurrencyError)
    async def unknown_currency_handler(request: Request, exc: UnknownCurrencyError):
        """A stored amount has a currency with no configured rate."""
        logger.error(f"Failed to fetch business metrics: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Failed to fetch business metrics",
                "detail": _detail(exc, "An internal error occurred"),
                "code": "unknown_currency",
            },
        )

    @app.exception_handler(DataStoreUnavailableError)
    async def data_store_handler(request: Request, exc: DataStoreUnavailableError):
        """The database could not serve the request."""
        logger.error(f"Data store unavailable: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "error": "Service Unavailable",
                "detail": _detail(exc, "The data store is unavailable"),
                "code": "data_store_unavailable",
            },
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch-all exception handler for unhandled errors."""
        logger.exception(f"Unhandled error: {exc}")

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal Server Error",
                "detail": _detail(exc, "An internal error occurred"),
            },
        )

    return app


# Create the application instance
app = create_app()


# Development server entry point
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bizmetrics.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
