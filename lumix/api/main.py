"""
FastAPI application factory.

Creates and configures the main application instance.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lumix import __version__
from lumix.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from lumix.api.middleware.error_handler import setup_exception_handlers
from lumix.api.routes import health_router, invoices_router, payroll_router, reports_router
from lumix.config import configure_logging, get_logger, get_settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Initializes resources on startup and cleans up on shutdown.
    """
    settings = get_settings()
    configure_logging()

    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        debug=settings.api.debug,
        environment=settings.environment,
    )

    try:
        from lumix.infrastructure.storage.sqlite import get_pool
        from lumix.infrastructure.storage.sqlite.migrations import run_migrations

        await run_migrations()
        logger.info("database_initialized")

        await get_pool()
        logger.info("connection_pool_ready")

    except Exception as e:
        logger.error("database_init_failed", error=str(e))
        raise

    if not settings.email.api_key:
        logger.warning("email_api_key_missing")

    logger.info("application_started")

    yield

    logger.info("application_stopping")

    try:
        from lumix.infrastructure.email import close_email_sender

        await close_email_sender()
        logger.info("email_client_closed")

    except Exception as e:
        logger.warning("email_client_close_failed", error=str(e))

    try:
        from lumix.infrastructure.storage.sqlite import close_pool

        await close_pool()
        logger.info("connection_pool_closed")

    except Exception as e:
        logger.warning("connection_pool_close_failed", error=str(e))

    logger.info("application_stopped")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Lumix Back Office API",
        description="Invoicing, invoice export and payroll runs",
        version=__version__,
        docs_url="/docs" if settings.api.debug else None,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Add middleware
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    # CORS
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Register routers
    app.include_router(health_router)
    app.include_router(invoices_router)
    app.include_router(payroll_router)
    app.include_router(reports_router)

    return app


# Create app instance
app = create_app()


def main() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "lumix.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )


if __name__ == "__main__":
    main()
