"""
Log-only notification sender.

Stands in for a real e-mail provider in development and tests: every send
succeeds and a short preview is logged (the PHI filter masks the address and
the access link).
"""

import uuid

from mbc_tracker.core.interfaces.services.notification_interface import (
    INotificationSender,
    NotificationMessage,
    NotificationResult,
)
from mbc_tracker.core.utils.logging import get_logger

logger = get_logger(__name__)

PREVIEW_LENGTH = 200


class LoggingNotificationSender(INotificationSender):
    channel = "email"

    def __init__(self) -> None:
        self.sent: list[tuple[str, NotificationMessage]] = []

    async def send(self, destination: str, message: NotificationMessage) -> NotificationResult:
        message_id = f"fake-{uuid.uuid4().hex[:16]}"
        self.sent.append((destination, message))
        logger.info(
            "Fake e-mail sent to %s | subject=%r | id=%s | preview=%s",
            destination,
            message.subject,
            message_id,
            message.body[:PREVIEW_LENGTH],
        )
        return NotificationResult(success=True, message_id=message_id)
