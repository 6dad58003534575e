"""Repository interfaces."""

from mbc_tracker.core.interfaces.repositories.assessment_instance_repository_interface import (
    IAssessmentInstanceRepository,
)
from mbc_tracker.core.interfaces.repositories.audit_event_repository_interface import (
    IAuditEventRepository,
)
from mbc_tracker.core.interfaces.repositories.encounter_repository_interface import (
    IEncounterRepository,
)
from mbc_tracker.core.interfaces.repositories.measure_repository_interface import (
    IMeasureRepository,
)
from mbc_tracker.core.interfaces.repositories.patient_repository_interface import (
    IPatientRepository,
)
from mbc_tracker.core.interfaces.repositories.policy_repository_interface import (
    IPolicyRepository,
)
from mbc_tracker.core.interfaces.repositories.response_repository_interface import (
    IAssessmentResponseRepository,
)

__all__ = [
    "IAssessmentInstanceRepository",
    "IAssessmentResponseRepository",
    "IAuditEventRepository",
    "IEncounterRepository",
    "IMeasureRepository",
    "IPatientRepository",
    "IPolicyRepository",
]
