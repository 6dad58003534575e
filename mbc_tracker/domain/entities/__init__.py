"""Domain entities."""

from mbc_tracker.domain.entities.assessment_instance import (
    NON_TERMINAL_STATUSES,
    SENDABLE_STATUSES,
    STARTABLE_STATUSES,
    TERMINAL_STATUSES,
    AssessmentInstance,
    InstanceStatus,
)
from mbc_tracker.domain.entities.assessment_response import Answer, AssessmentResponse
from mbc_tracker.domain.entities.audit_event import AuditEvent
from mbc_tracker.domain.entities.encounter import Encounter, EncounterStatus
from mbc_tracker.domain.entities.measure import Measure, QuestionDefinition, SeverityBand
from mbc_tracker.domain.entities.patient import Patient
from mbc_tracker.domain.entities.policy import Policy

__all__ = [
    "NON_TERMINAL_STATUSES",
    "SENDABLE_STATUSES",
    "STARTABLE_STATUSES",
    "TERMINAL_STATUSES",
    "Answer",
    "AssessmentInstance",
    "AssessmentResponse",
    "AuditEvent",
    "Encounter",
    "EncounterStatus",
    "InstanceStatus",
    "Measure",
    "Patient",
    "Policy",
    "QuestionDefinition",
    "SeverityBand",
]
