"""
Audit Constants Module

This module defines the audit event kinds recorded by the engine. Every
state-changing operation on an assessment instance produces at least one
of these events.
"""

from enum import Enum


class AuditEventType(str, Enum):
    """
    Kinds of audit events for categorization and filtering.

    Values are persisted verbatim in the audit store, so existing members
    must never be renamed.
    """

    # Assessment instance lifecycle
    INSTANCE_CREATED = "INSTANCE_CREATED"
    LINK_GENERATED = "LINK_GENERATED"
    LINK_SENT = "LINK_SENT"
    QUESTIONNAIRE_STARTED = "QUESTIONNAIRE_STARTED"
    QUESTIONNAIRE_SUBMITTED = "QUESTIONNAIRE_SUBMITTED"
    SCORE_COMPUTED = "SCORE_COMPUTED"
    INSTANCE_EXPIRED = "INSTANCE_EXPIRED"
    INSTANCE_CANCELLED = "INSTANCE_CANCELLED"

    # Clinical records
    CLINICIAN_VIEWED_CHART = "CLINICIAN_VIEWED_CHART"
    PATIENT_CREATED = "PATIENT_CREATED"
    PATIENT_UPDATED = "PATIENT_UPDATED"
    APPOINTMENT_CREATED = "APPOINTMENT_CREATED"
    APPOINTMENT_CANCELLED = "APPOINTMENT_CANCELLED"

    # Access
    USER_LOGIN = "USER_LOGIN"


class AuditResourceType(str, Enum):
    """Resource types referenced by audit events."""

    ASSESSMENT_INSTANCE = "MeasureInstance"
    ASSESSMENT_RESPONSE = "MeasureResponse"
    PATIENT = "Patient"
    ENCOUNTER = "Appointment"
    POLICY = "MbcPolicy"
