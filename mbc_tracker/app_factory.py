"""
Application factory for the MBC Tracker API.

Builds the FastAPI application, wires infrastructure onto ``app.state`` and
manages the database engine over the application lifespan.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI

from mbc_tracker.application.services.instance_generator import seed_measures
from mbc_tracker.core.config.settings import Settings, get_settings
from mbc_tracker.core.interfaces.services.notification_interface import INotificationSender
from mbc_tracker.core.interfaces.unit_of_work import UnitOfWorkFactory
from mbc_tracker.core.logging_config import setup_logging
from mbc_tracker.core.utils.date_utils import Clock, utcnow
from mbc_tracker.domain.services.scoring import MeasureScorer
from mbc_tracker.infrastructure.notifications import LoggingNotificationSender
from mbc_tracker.infrastructure.persistence.sqlalchemy.session import (
    create_all_tables,
    create_engine_from_settings,
    create_session_factory,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.unit_of_work import (
    UnitOfWorkFactory as SQLAlchemyUnitOfWorkFactory,
)
from mbc_tracker.presentation.api.exception_handlers import register_exception_handlers
from mbc_tracker.presentation.api.v1.api_router import api_v1_router

logger = logging.getLogger(__name__)


def _initialize_sentry(settings: Settings) -> None:
    """Initializes Sentry if DSN is provided."""
    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.ENVIRONMENT,
            release=settings.API_VERSION,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            # Answers and contact details must never leave the process
            send_default_pii=False,
        )
        logger.info("Sentry initialized for error tracking.")
    else:
        logger.info("Sentry DSN not provided, skipping Sentry initialization.")


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application.

    Handles application startup and shutdown operations:
    1. Creates the database engine and unit of work factory (unless injected)
    2. Creates the schema and seeds the measure catalog
    3. Disposes the engine on shutdown
    """
    settings: Settings = fastapi_app.state.settings
    engine = None

    if fastapi_app.state.uow_factory is None:
        engine = create_engine_from_settings(settings)
        session_factory = create_session_factory(engine)
        await create_all_tables(engine)
        fastapi_app.state.db_engine = engine
        fastapi_app.state.uow_factory = SQLAlchemyUnitOfWorkFactory(session_factory)
        logger.info("Database engine initialized")

    await seed_measures(fastapi_app.state.uow_factory, fastapi_app.state.scorer)

    try:
        yield
    finally:
        if engine is not None:
            await engine.dispose()
            fastapi_app.state.uow_factory = None
            logger.info("Database engine disposed")


def create_application(
    settings_override: Settings | None = None,
    uow_factory: UnitOfWorkFactory | None = None,
    notification_sender: INotificationSender | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        settings_override: Override default settings (useful for testing)
        uow_factory: Pre-built unit of work factory; the lifespan builds one otherwise
        notification_sender: Delivery channel; defaults to the logging sender
        clock: Source of "now" for every service

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    settings = settings_override or get_settings()

    setup_logging(settings.LOG_LEVEL, settings.AUDIT_LOG_FILE)
    _initialize_sentry(settings)

    app = FastAPI(
        title=settings.API_TITLE,
        description=settings.API_DESCRIPTION,
        version=settings.API_VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.uow_factory = uow_factory
    app.state.scorer = MeasureScorer()
    app.state.notification_sender = notification_sender or LoggingNotificationSender()
    app.state.clock = clock or utcnow

    register_exception_handlers(app)
    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok", "environment": settings.ENVIRONMENT}

    logger.info(f"Application created for environment: {settings.ENVIRONMENT}")
    return app
