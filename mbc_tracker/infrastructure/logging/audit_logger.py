"""
Audit log mirror.

Every audit event that reaches the database is also written as one JSON line
to the ``mbc.audit`` logger (a rotating file when ``AUDIT_LOG_FILE`` is set).
Failed database writes are reported on the same logger at ERROR so they can
be monitored separately from application errors.
"""

import json
import logging
from typing import Any

from mbc_tracker.domain.entities.audit_event import AuditEvent

AUDIT_LOGGER_NAME = "mbc.audit"


class AuditLogger:
    """Writes machine-readable audit lines."""

    _logger = logging.getLogger(AUDIT_LOGGER_NAME)

    @classmethod
    def log_event(cls, event: AuditEvent) -> None:
        """Mirror a persisted event."""
        payload = event.to_log_dict()
        # Access tokens never leave the database
        if payload.get("metadata"):
            payload["metadata"] = {
                key: value for key, value in payload["metadata"].items() if key != "token"
            }
        cls._logger.info(json.dumps(payload, sort_keys=True, default=str))

    @classmethod
    def log_write_failure(
        cls,
        event_type: str,
        error: BaseException,
        resource_id: str | None = None,
        failed_writes: int | None = None,
    ) -> None:
        details: dict[str, Any] = {
            "event_type": event_type,
            "resource_id": resource_id,
            "error": type(error).__name__,
        }
        if failed_writes is not None:
            details["failed_writes"] = failed_writes
        cls._logger.error(f"AUDIT_WRITE_FAILED: {json.dumps(details, sort_keys=True)}")
