"""
Exception classes for the application domain.

This module exports common exceptions used throughout the application.
"""

from mbc_tracker.domain.exceptions.assessment_exceptions import (
    AlreadyScheduledError,
    AssessmentError,
    InstanceAlreadyCompletedError,
    InstanceCancelledError,
    InstanceExpiredError,
    InvalidInstanceStateError,
)
from mbc_tracker.domain.exceptions.base_exceptions import (
    BaseApplicationError,
    ConfigurationError,
    ValidationFailedError,
)
from mbc_tracker.domain.exceptions.persistence_exceptions import (
    AuditWriteFailedError,
    EntityNotFoundError,
    PersistenceError,
    RepositoryError,
)

__all__ = [
    "AlreadyScheduledError",
    "AssessmentError",
    "AuditWriteFailedError",
    # Base exceptions
    "BaseApplicationError",
    "ConfigurationError",
    # Persistence exceptions
    "EntityNotFoundError",
    # Assessment state exceptions
    "InstanceAlreadyCompletedError",
    "InstanceCancelledError",
    "InstanceExpiredError",
    "InvalidInstanceStateError",
    "PersistenceError",
    "RepositoryError",
    "ValidationFailedError",
]
