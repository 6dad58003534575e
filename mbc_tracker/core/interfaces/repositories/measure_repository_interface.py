"""
Interface for the Measure Repository.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from mbc_tracker.domain.entities.measure import Measure


class IMeasureRepository(ABC):
    """Persistence contract for measure definitions."""

    @abstractmethod
    async def get_by_id(self, measure_id: UUID) -> Measure | None:
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Measure | None:
        pass

    @abstractmethod
    async def list_all(self) -> list[Measure]:
        pass

    @abstractmethod
    async def upsert(self, measure: Measure) -> Measure:
        """Insert the measure, or return the stored one with the same name unchanged."""
        pass
