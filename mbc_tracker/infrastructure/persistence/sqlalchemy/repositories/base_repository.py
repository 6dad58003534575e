"""
Base SQLAlchemy repository implementation.

This module provides a foundational repository implementation using SQLAlchemy ORM:
entity/model mapping hooks and the common add / get-by-id operations.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mbc_tracker.core.utils.logging import get_logger
from mbc_tracker.domain.exceptions import RepositoryError

# Type variables for entity mapping
EntityT = TypeVar("EntityT")  # Domain entity
ModelT = TypeVar("ModelT")  # SQLAlchemy model

logger = get_logger(__name__)


class BaseSQLAlchemyRepository(Generic[EntityT, ModelT]):
    """
    Base repository implementation for SQLAlchemy ORM models.

    Subclasses provide ``_to_entity`` and ``_to_model``.
    """

    model_class: type[Any]

    def __init__(self, session: AsyncSession):
        """
        Initialize the repository with a session.

        Args:
            session: SQLAlchemy async session owned by the unit of work
        """
        self._session = session

    @property
    def dialect_name(self) -> str:
        return self._session.get_bind().dialect.name

    async def _add(self, entity: EntityT) -> EntityT:
        try:
            model = self._to_model(entity)
            self._session.add(model)
            # Flush so constraint violations surface inside the caller's transaction
            await self._session.flush()
            return self._to_entity(model)
        except SQLAlchemyError as e:
            logger.error(f"Error adding {type(entity).__name__}: {e}")
            raise RepositoryError(
                "Failed to add entity",
                repository=type(self).__name__,
                operation="add",
                original_exception=e,
            ) from e

    async def get_by_id(self, entity_id: Any) -> EntityT | None:
        """
        Get an entity by its ID.

        Raises:
            RepositoryError: If database operation fails
        """
        try:
            query = select(self.model_class).where(self.model_class.id == entity_id)
            result = await self._session.execute(query)
            model = result.scalars().first()
            return self._to_entity(model) if model else None
        except SQLAlchemyError as e:
            logger.error(f"Error getting entity by ID: {e}")
            raise RepositoryError(
                "Failed to get entity by ID",
                repository=type(self).__name__,
                operation="get_by_id",
                original_exception=e,
            ) from e

    def _error(self, operation: str, error: SQLAlchemyError) -> RepositoryError:
        logger.error(f"{type(self).__name__}.{operation} failed: {error}")
        return RepositoryError(
            "Database operation failed",
            repository=type(self).__name__,
            operation=operation,
            original_exception=error,
        )

    def _to_entity(self, model: ModelT) -> EntityT:
        raise NotImplementedError

    def _to_model(self, entity: EntityT) -> ModelT:
        raise NotImplementedError
