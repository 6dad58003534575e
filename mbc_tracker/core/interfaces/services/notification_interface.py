"""
Notification sender interface.

The engine only needs a boolean outcome from a send attempt to drive the
PENDING -> SENT transition; channel details stay behind this contract.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class NotificationMessage:
    subject: str
    body: str
    link: str | None = None


@dataclass(frozen=True)
class NotificationResult:
    success: bool
    message_id: str | None = None
    error: str | None = None


class INotificationSender(ABC):
    """Delivers a rendered message to a destination (e-mail address, phone number)."""

    channel: str = "email"

    @abstractmethod
    async def send(self, destination: str, message: NotificationMessage) -> NotificationResult:
        """
        Attempt delivery.

        Implementations report failure through the result instead of raising.
        """
        pass
