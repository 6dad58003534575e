"""
Notification dispatcher.

Delivers magic links through a notification sender and reports successful
deliveries to the lifecycle manager. A failed delivery leaves the instance
state untouched so the next batch run retries it.
"""

import logging
from datetime import timedelta
from typing import Any
from uuid import UUID

from mbc_tracker.application.services.lifecycle_manager import LifecycleManager
from mbc_tracker.core.interfaces.services.notification_interface import (
    INotificationSender,
    NotificationResult,
)
from mbc_tracker.core.interfaces.unit_of_work import UnitOfWorkFactory
from mbc_tracker.core.utils.date_utils import Clock, utcnow
from mbc_tracker.domain.exceptions import (
    EntityNotFoundError,
    InvalidInstanceStateError,
    ValidationFailedError,
)
from mbc_tracker.infrastructure.notifications.templates import (
    build_magic_link,
    render_magic_link_message,
)

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        lifecycle: LifecycleManager,
        sender: INotificationSender,
        base_url: str,
        lookahead_hours: int = 24,
        clock: Clock = utcnow,
    ):
        """
        Initialize the dispatcher.

        Args:
            uow_factory: Creates units of work for reads
            lifecycle: Records successful deliveries (PENDING -> SENT)
            sender: Delivery channel
            base_url: Public application URL magic links point at
            lookahead_hours: Batch window for PENDING instances coming due
            clock: Source of "now"
        """
        self._uow_factory = uow_factory
        self._lifecycle = lifecycle
        self._sender = sender
        self._base_url = base_url
        self._lookahead_hours = lookahead_hours
        self._clock = clock

    async def dispatch(self, instance_id: UUID, source: str = "manual") -> NotificationResult:
        """
        Send the magic link for one instance.

        Raises:
            EntityNotFoundError: Unknown instance
            ValidationFailedError: The patient has no e-mail address
            InvalidInstanceStateError: The instance is terminal or expired
        """
        instance = await self._lifecycle.get_sendable(instance_id)
        async with self._uow_factory() as uow:
            patient = await uow.patients.get_by_id(instance.patient_id)

        if patient is None or not patient.email:
            raise ValidationFailedError("Patient has no email address", field="email")

        message = render_magic_link_message(
            patient_first_name=patient.first_name,
            measure_name=instance.measure_name or "Assessment",
            due_date=instance.due_date,
            expires_at=instance.expires_at,
            magic_link_url=build_magic_link(self._base_url, instance.token),
        )
        try:
            result = await self._sender.send(patient.email, message)
        except Exception as e:
            logger.error(f"Notification for instance {instance.id} failed: {type(e).__name__}")
            result = NotificationResult(success=False, error=str(e))

        if result.success:
            await self._lifecycle.mark_sent(
                instance.id,
                message_id=result.message_id,
                channel=self._sender.channel,
                source=source,
            )
        else:
            logger.warning(f"Notification for instance {instance.id} not delivered: {result.error}")
        return result

    async def send_pending_notifications(self) -> dict[str, Any]:
        """
        Send links for PENDING instances due within the lookahead window.

        Instances whose patient has no e-mail address are not attempted.
        """
        now = self._clock()
        until = now + timedelta(hours=self._lookahead_hours)
        async with self._uow_factory() as uow:
            pending = await uow.instances.list_pending_due_before(until, now)
            patients = await uow.patients.get_many(list({i.patient_id for i in pending}))

        reachable = [
            instance
            for instance in pending
            if patients.get(instance.patient_id) and patients[instance.patient_id].email
        ]

        results = []
        sent = failed = 0
        for instance in reachable:
            try:
                result = await self.dispatch(instance.id, source="batch")
            except (EntityNotFoundError, InvalidInstanceStateError, ValidationFailedError) as e:
                # Instance changed state since it was listed
                result = NotificationResult(success=False, error=e.message)

            if result.success:
                sent += 1
            else:
                failed += 1
            results.append(
                {
                    "instance_id": str(instance.id),
                    "success": result.success,
                    "message_id": result.message_id,
                    "error": result.error,
                }
            )

        logger.info(f"Notification batch: {sent} sent, {failed} failed of {len(reachable)}")
        return {"total": len(reachable), "sent": sent, "failed": failed, "results": results}
