from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from asset_approvals.api.health import router as health_router
from asset_approvals.api.router import api_router
from asset_approvals.config import get_settings
from asset_approvals.db import create_schema, dispose_engine, get_engine
from asset_approvals.exceptions import setup_exception_handlers
from asset_approvals.middleware import setup_middleware
from asset_approvals.services.notifications import wait_for_pending_notifications
from asset_approvals.services.users import get_user_directory, seed_demo_users

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(level=level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup and shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting %s v%s [%s]", settings.app_name, settings.app_version, settings.environment)
    if settings.database_url.startswith("sqlite"):
        await create_schema(get_engine())
        logger.info("Created schema on local SQLite database")
    if settings.environment == "development":
        seeded = seed_demo_users(get_user_directory())
        if seeded:
            logger.info("Seeded %d demo users into the in-memory directory", seeded)
    yield
    await wait_for_pending_notifications()
    await dispose_engine()
    logger.info("Shutting down %s", settings.app_name)


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )

    setup_middleware(application, settings)
    setup_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(api_router)

    return application


app = create_app()
