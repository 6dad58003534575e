"""
Interface for the Patient Repository.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from mbc_tracker.domain.entities.patient import Patient


class IPatientRepository(ABC):
    """Persistence contract for patients."""

    @abstractmethod
    async def create(self, patient: Patient) -> Patient:
        pass

    @abstractmethod
    async def get_by_id(self, patient_id: UUID) -> Patient | None:
        pass

    @abstractmethod
    async def get_many(self, patient_ids: list[UUID]) -> dict[UUID, Patient]:
        """Load several patients at once, keyed by id; unknown ids are omitted."""
        pass
