"""
Factory for creating Unit of Work instances.

This module provides a dependency-injection friendly way to create
UnitOfWork instances bound to one session factory.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mbc_tracker.core.interfaces.unit_of_work import IUnitOfWork
from mbc_tracker.infrastructure.persistence.sqlalchemy.unit_of_work.async_unit_of_work import (
    AsyncSQLAlchemyUnitOfWork,
)


class UnitOfWorkFactory:
    """
    Callable factory producing a fresh, not-yet-entered unit of work.

    Application services receive this instead of a session so that each
    operation (and each best-effort audit write) gets its own transaction.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository_classes: dict[str, type[Any]] | None = None,
    ):
        self.session_factory = session_factory
        self._repository_classes = repository_classes

    def create_unit_of_work(self) -> IUnitOfWork:
        return AsyncSQLAlchemyUnitOfWork(
            session_factory=self.session_factory,
            repository_classes=self._repository_classes,
        )

    def __call__(self) -> IUnitOfWork:
        return self.create_unit_of_work()
