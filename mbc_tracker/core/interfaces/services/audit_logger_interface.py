"""
Audit Logger Interface.

This module defines the interface for the audit sink that every mutation path
writes to. Implementations must never raise on a failed write: audit
completeness is secondary to the availability of the primary workflow.
"""

from abc import ABC, abstractmethod
from typing import Any

from mbc_tracker.core.constants.audit import AuditEventType, AuditResourceType
from mbc_tracker.domain.entities.audit_event import AuditEvent


class IAuditLogger(ABC):
    """Interface for best-effort audit logging."""

    @abstractmethod
    async def log_event(
        self,
        event_type: AuditEventType,
        *,
        actor_id: str | None = None,
        patient_id: str | None = None,
        resource_type: AuditResourceType | None = None,
        resource_id: str | None = None,
        metadata: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AuditEvent | None:
        """
        Record an audit event.

        Returns:
            The stored event, or None when the write failed (already logged)
        """
        pass
