"""
Interface for the Assessment Response Repository.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from mbc_tracker.domain.entities.assessment_response import AssessmentResponse


class IAssessmentResponseRepository(ABC):
    """Append-only store of completed questionnaire responses."""

    @abstractmethod
    async def add(self, response: AssessmentResponse) -> AssessmentResponse:
        """
        Persist a response.

        Raises:
            InvalidInstanceStateError: a response already exists for the instance
        """
        pass

    @abstractmethod
    async def get_by_instance_id(self, instance_id: UUID) -> AssessmentResponse | None:
        pass

    @abstractmethod
    async def list_for_patient(self, patient_id: UUID) -> list[tuple[str, AssessmentResponse]]:
        """``(measure_name, response)`` pairs for a patient, oldest completion first."""
        pass
