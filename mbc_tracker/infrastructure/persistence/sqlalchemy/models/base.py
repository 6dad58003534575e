"""Base SQLAlchemy models module.

This module defines the declarative base class (Base) used for all ORM
models in this application, plus the shared timestamp mixin.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from mbc_tracker.core.utils.date_utils import utcnow
from mbc_tracker.infrastructure.persistence.sqlalchemy.registry import metadata
from mbc_tracker.infrastructure.persistence.sqlalchemy.types import UTCDateTime


class Base(DeclarativeBase, AsyncAttrs):
    """
    SQLAlchemy 2.0 declarative base with async support.

    Combines DeclarativeBase for proper typing with AsyncAttrs for async support.
    """

    # Use the shared metadata from registry for consistency
    metadata = metadata


class TimestampMixin:
    """Mixin adding a creation timestamp set on the Python side in UTC."""

    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow, nullable=False)
