"""
Interface for the Encounter Repository.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from mbc_tracker.domain.entities.encounter import Encounter


class IEncounterRepository(ABC):
    """Persistence contract for scheduled encounters."""

    @abstractmethod
    async def create(self, encounter: Encounter) -> Encounter:
        pass

    @abstractmethod
    async def get_by_id(self, encounter_id: UUID) -> Encounter | None:
        pass

    @abstractmethod
    async def update(self, encounter: Encounter) -> Encounter:
        pass

    @abstractmethod
    async def list_for_patient(self, patient_id: UUID) -> list[Encounter]:
        """All encounters for a patient, earliest first."""
        pass

    @abstractmethod
    async def list_upcoming_without_instances(
        self, start: datetime, end: datetime
    ) -> list[Encounter]:
        """
        Non-cancelled encounters scheduled in ``[start, end]`` that have no
        assessment instance of any measure attached.
        """
        pass
