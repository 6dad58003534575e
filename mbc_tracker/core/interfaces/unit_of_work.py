"""Unit of Work interface definition.

This module defines the Unit of Work pattern interface which provides
a transactional boundary for database operations across multiple repositories.
The COMPLETED transition relies on it: the response insert and the status
update commit together or not at all.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from types import TracebackType

from mbc_tracker.core.interfaces.repositories import (
    IAssessmentInstanceRepository,
    IAssessmentResponseRepository,
    IAuditEventRepository,
    IEncounterRepository,
    IMeasureRepository,
    IPatientRepository,
    IPolicyRepository,
)


class IUnitOfWork(ABC):
    """
    Unit of Work interface defining a transaction boundary for domain operations.

    Leaving the context commits when no exception was raised and rolls back
    otherwise.
    """

    @abstractmethod
    async def __aenter__(self) -> IUnitOfWork:
        """
        Enter the context manager, beginning a new transaction.

        Returns:
            The UnitOfWork instance for method chaining
        """
        pass

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        pass

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass

    # Repository property protocols
    @property
    @abstractmethod
    def policies(self) -> IPolicyRepository:
        pass

    @property
    @abstractmethod
    def measures(self) -> IMeasureRepository:
        pass

    @property
    @abstractmethod
    def patients(self) -> IPatientRepository:
        pass

    @property
    @abstractmethod
    def encounters(self) -> IEncounterRepository:
        pass

    @property
    @abstractmethod
    def instances(self) -> IAssessmentInstanceRepository:
        pass

    @property
    @abstractmethod
    def responses(self) -> IAssessmentResponseRepository:
        pass

    @property
    @abstractmethod
    def audit_events(self) -> IAuditEventRepository:
        pass


# Each call returns a fresh, not-yet-entered unit of work.
UnitOfWorkFactory = Callable[[], IUnitOfWork]
