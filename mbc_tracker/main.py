"""
MBC Tracker FastAPI application.

This is the main application entry point: it builds the application with
the configured settings. Run with ``uvicorn mbc_tracker.main:app``.
"""

import logging

import uvicorn

from mbc_tracker.app_factory import create_application
from mbc_tracker.core.config.settings import get_settings

logger = logging.getLogger(__name__)

# This is the exported app that Uvicorn will use when run with "mbc_tracker.main:app"
app = create_application()

if __name__ == "__main__":
    settings = get_settings()

    logger.info(
        f"Starting Uvicorn server. Host: {settings.SERVER_HOST}, Port: {settings.SERVER_PORT}, "
        f"LogLevel: {settings.LOG_LEVEL.lower()}"
    )
    uvicorn.run(
        "mbc_tracker.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.ENVIRONMENT == "development",
        workers=settings.UVICORN_WORKERS,
    )
