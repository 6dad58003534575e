"""SQLAlchemy repository implementations."""

from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories.assessment_instance_repository import (
    SQLAlchemyAssessmentInstanceRepository,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories.assessment_response_repository import (
    SQLAlchemyAssessmentResponseRepository,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories.audit_event_repository import (
    SQLAlchemyAuditEventRepository,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories.encounter_repository import (
    SQLAlchemyEncounterRepository,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories.measure_repository import (
    SQLAlchemyMeasureRepository,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories.patient_repository import (
    SQLAlchemyPatientRepository,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.repositories.policy_repository import (
    SQLAlchemyPolicyRepository,
)

__all__ = [
    "SQLAlchemyAssessmentInstanceRepository",
    "SQLAlchemyAssessmentResponseRepository",
    "SQLAlchemyAuditEventRepository",
    "SQLAlchemyEncounterRepository",
    "SQLAlchemyMeasureRepository",
    "SQLAlchemyPatientRepository",
    "SQLAlchemyPolicyRepository",
]
