"""
Async SQLAlchemy Unit of Work implementation.

This module provides the Unit of Work pattern using AsyncIO and SQLAlchemy:
one session and one transaction per ``async with`` block, committed on a
clean exit and rolled back when the block raises.
"""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mbc_tracker.core.interfaces.unit_of_work import IUnitOfWork
from mbc_tracker.domain.exceptions import RepositoryError
from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyAssessmentInstanceRepository,
    SQLAlchemyAssessmentResponseRepository,
    SQLAlchemyAuditEventRepository,
    SQLAlchemyEncounterRepository,
    SQLAlchemyMeasureRepository,
    SQLAlchemyPatientRepository,
    SQLAlchemyPolicyRepository,
)

logger = logging.getLogger(__name__)

REPOSITORY_CLASSES: dict[str, type[Any]] = {
    "policies": SQLAlchemyPolicyRepository,
    "measures": SQLAlchemyMeasureRepository,
    "patients": SQLAlchemyPatientRepository,
    "encounters": SQLAlchemyEncounterRepository,
    "instances": SQLAlchemyAssessmentInstanceRepository,
    "responses": SQLAlchemyAssessmentResponseRepository,
    "audit_events": SQLAlchemyAuditEventRepository,
}


class AsyncSQLAlchemyUnitOfWork(IUnitOfWork):
    """
    Async SQLAlchemy Unit of Work.

    Manages session lifecycle and transaction boundaries; repositories are
    created lazily and bound to the current session.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository_classes: dict[str, type[Any]] | None = None,
    ):
        """
        Initialize the Unit of Work.

        Args:
            session_factory: Async SQLAlchemy session factory
            repository_classes: Overrides for repository implementations, keyed by property name
        """
        self.session_factory = session_factory
        self._repository_classes = {**REPOSITORY_CLASSES, **(repository_classes or {})}
        self._session: AsyncSession | None = None
        self._repositories: dict[str, Any] = {}
        self._transaction_started = False

    async def __aenter__(self) -> "AsyncSQLAlchemyUnitOfWork":
        self._session = self.session_factory()
        try:
            await self._session.begin()
        except SQLAlchemyError as e:
            await self._session.close()
            self._session = None
            logger.error(f"Could not begin transaction: {e}")
            raise RepositoryError(f"Failed to begin transaction: {e!s}") from e
        self._transaction_started = True
        logger.debug("Started async UoW context: Session created, transaction begun.")
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any | None,
    ) -> None:
        if self._session is None:
            logger.warning(f"UoW {id(self)}: __aexit__ called without an active session.")
            return

        try:
            if exc_type:
                logger.debug(f"Rolling back transaction due to {exc_type.__name__}")
                await self._session.rollback()
            else:
                await self._session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error during transaction cleanup: {e}")
            if self._session and self._transaction_started:
                await self._session.rollback()
            raise RepositoryError(f"Database error during transaction: {e!s}") from e
        finally:
            if self._session:
                await self._session.close()
            self._session = None
            self._transaction_started = False
            self._repositories = {}

    async def commit(self) -> None:
        """
        Commit the current transaction and begin a new one.

        Raises:
            RepositoryError: If no session is active or the commit fails
        """
        if self._session is None or not self._transaction_started:
            raise RepositoryError("No active transaction to commit.")

        try:
            await self._session.commit()
            await self._session.begin()
        except SQLAlchemyError as e:
            logger.error(f"Error during commit: {e}")
            raise RepositoryError(f"Failed to commit transaction: {e!s}") from e

    async def rollback(self) -> None:
        if self._session is None or not self._transaction_started:
            raise RepositoryError("No active transaction to roll back.")

        try:
            await self._session.rollback()
            await self._session.begin()
        except SQLAlchemyError as e:
            logger.error(f"Error during rollback: {e}")
            raise RepositoryError(f"Failed to roll back transaction: {e!s}") from e

    # ------------------------------------------------------------------
    # Repository properties
    # ------------------------------------------------------------------

    def _repository(self, name: str) -> Any:
        if self._session is None:
            raise RepositoryError("No active session. Use 'async with unit_of_work:' context.")
        if name not in self._repositories:
            self._repositories[name] = self._repository_classes[name](self._session)
        return self._repositories[name]

    @property
    def policies(self) -> SQLAlchemyPolicyRepository:
        return self._repository("policies")

    @property
    def measures(self) -> SQLAlchemyMeasureRepository:
        return self._repository("measures")

    @property
    def patients(self) -> SQLAlchemyPatientRepository:
        return self._repository("patients")

    @property
    def encounters(self) -> SQLAlchemyEncounterRepository:
        return self._repository("encounters")

    @property
    def instances(self) -> SQLAlchemyAssessmentInstanceRepository:
        return self._repository("instances")

    @property
    def responses(self) -> SQLAlchemyAssessmentResponseRepository:
        return self._repository("responses")

    @property
    def audit_events(self) -> SQLAlchemyAuditEventRepository:
        return self._repository("audit_events")
