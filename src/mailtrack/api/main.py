"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from mailtrack.infrastructure import get_settings, get_tracker


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    tracker = get_tracker()
    logger.info(f"Gmail push tracking {'enabled' if tracker.tracking_enabled else 'disabled'}")

    yield

    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Gmail account linking and mailbox tracking",
        lifespan=lifespan,
    )

    from mailtrack.api.routes import router
    from mailtrack.infrastructure.http.gmail_login import router as gmail_login_router

    app.include_router(router)
    app.include_router(gmail_login_router)

    return app


# Create app instance
app = create_app()
