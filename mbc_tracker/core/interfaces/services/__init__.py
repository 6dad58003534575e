"""Service interfaces."""

from mbc_tracker.core.interfaces.services.audit_logger_interface import IAuditLogger
from mbc_tracker.core.interfaces.services.notification_interface import (
    INotificationSender,
    NotificationMessage,
    NotificationResult,
)
from mbc_tracker.core.interfaces.services.scorer_interface import IScorer

__all__ = [
    "IAuditLogger",
    "INotificationSender",
    "IScorer",
    "NotificationMessage",
    "NotificationResult",
]
