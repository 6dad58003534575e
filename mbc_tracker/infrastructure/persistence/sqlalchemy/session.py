"""
SQLAlchemy engine and session management.

This module builds the async engine and session factory from settings.
SQLite connections are switched to manual transaction control so every
transaction starts with ``BEGIN IMMEDIATE``: writers are serialized by the
database file lock and SAVEPOINTs behave as expected under aiosqlite.
"""

import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from mbc_tracker.core.config.settings import Settings
from mbc_tracker.infrastructure.persistence.sqlalchemy.models import Base

logger = logging.getLogger(__name__)


def _install_sqlite_transaction_hooks(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Disable the driver's implicit BEGIN; SQLAlchemy emits our own below
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured database.

    Args:
        settings: Application settings

    Returns:
        AsyncEngine: Configured engine
    """
    db_url = settings.ASYNC_DATABASE_URL or settings.DATABASE_URL

    if settings.is_sqlite:
        engine = create_async_engine(
            db_url,
            echo=settings.DB_ECHO_LOG,
            connect_args={"timeout": settings.SQLITE_BUSY_TIMEOUT_SECONDS},
        )
        _install_sqlite_transaction_hooks(engine)
    else:
        engine = create_async_engine(db_url, echo=settings.DB_ECHO_LOG, pool_pre_ping=True)

    logger.info("Database engine created for dialect '%s'", engine.dialect.name)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
        autoflush=False,
        class_=AsyncSession,
    )


async def create_all_tables(engine: AsyncEngine) -> None:
    """Create every table registered on the shared metadata (idempotent)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
