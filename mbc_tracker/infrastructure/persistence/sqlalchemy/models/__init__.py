"""
SQLAlchemy models.

Importing this package registers every table on ``Base.metadata``.
"""

from mbc_tracker.infrastructure.persistence.sqlalchemy.models.assessment_instance import (
    AssessmentInstanceModel,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.assessment_response import (
    AssessmentResponseModel,
)
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.audit_event import AuditEventModel
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.base import Base
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.encounter import EncounterModel
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.measure import MeasureModel
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.patient import PatientModel
from mbc_tracker.infrastructure.persistence.sqlalchemy.models.policy import PolicyModel

__all__ = [
    "AssessmentInstanceModel",
    "AssessmentResponseModel",
    "AuditEventModel",
    "Base",
    "EncounterModel",
    "MeasureModel",
    "PatientModel",
    "PolicyModel",
]
