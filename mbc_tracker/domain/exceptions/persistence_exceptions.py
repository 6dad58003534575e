"""
Exception classes related to persistence operations.

This module defines exceptions raised during database and repository operations.
"""

from mbc_tracker.domain.exceptions.base_exceptions import BaseApplicationError


class PersistenceError(BaseApplicationError):
    """Base class for persistence-related exceptions."""

    def __init__(
        self,
        message: str = "Persistence operation failed",
        original_exception: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.original_exception = original_exception


class EntityNotFoundError(PersistenceError):
    """Raised when an entity cannot be found in the persistence layer."""

    def __init__(
        self,
        entity_type: str | None = None,
        entity_id: str | None = None,
        message: str | None = None,
    ) -> None:
        if message is None:
            if entity_type and entity_id:
                message = f"{entity_type} with ID {entity_id} not found"
            elif entity_type:
                message = f"{entity_type} not found"
            else:
                message = "Entity not found"
        super().__init__(message)
        self.entity_type = entity_type
        self.entity_id = entity_id


class RepositoryError(PersistenceError):
    """Raised when a repository operation fails."""

    def __init__(
        self,
        message: str = "Repository operation failed",
        repository: str | None = None,
        operation: str | None = None,
        original_exception: Exception | None = None,
    ) -> None:
        if repository and operation:
            message = f"{message} in {repository} during {operation}"
        elif repository:
            message = f"{message} in {repository}"
        super().__init__(message, original_exception)
        self.repository = repository
        self.operation = operation


class AuditWriteFailedError(PersistenceError):
    """Raised by the audit store when an event could not be persisted."""

    def __init__(
        self,
        event_type: str,
        original_exception: Exception | None = None,
    ) -> None:
        super().__init__(f"Failed to write audit event {event_type}", original_exception)
        self.event_type = event_type
