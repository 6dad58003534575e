"""
Integration tests for NotificationDispatcher.
"""

from datetime import timedelta

import pytest

from mbc_tracker.application.services import NotificationDispatcher
from mbc_tracker.core.interfaces.services.notification_interface import (
    INotificationSender,
    NotificationResult,
)
from mbc_tracker.domain.entities.assessment_instance import InstanceStatus
from mbc_tracker.domain.entities.patient import Patient
from mbc_tracker.domain.exceptions import (
    InstanceCancelledError,
    InstanceExpiredError,
    ValidationFailedError,
)
from mbc_tracker.infrastructure.notifications import LoggingNotificationSender
from mbc_tracker.tests.conftest import T0


class RejectingSender(INotificationSender):
    channel = "sms"

    async def send(self, destination, message):
        return NotificationResult(success=False, error="mailbox unavailable")


class ExplodingSender(INotificationSender):
    async def send(self, destination, message):
        raise ConnectionError("provider timeout")


@pytest.fixture
def sender() -> LoggingNotificationSender:
    return LoggingNotificationSender()


def _dispatcher(uow_factory, lifecycle, sender, clock):
    return NotificationDispatcher(
        uow_factory,
        lifecycle,
        sender,
        base_url="https://mbc.example.test",
        lookahead_hours=24,
        clock=clock,
    )


@pytest.fixture
def dispatcher(uow_factory, lifecycle, sender, clock):
    return _dispatcher(uow_factory, lifecycle, sender, clock)


async def _status(uow_factory, instance_id):
    async with uow_factory() as uow:
        return (await uow.instances.get_by_id(instance_id)).status


@pytest.mark.integration
class TestDispatch:
    @pytest.mark.asyncio
    async def test_delivers_link_and_marks_sent(
        self, dispatcher, sender, generator, patient, uow_factory, audit_logger
    ):
        phq9, _ = await generator.generate_instances(patient.id)

        result = await dispatcher.dispatch(phq9.id)

        assert result.success
        assert result.message_id.startswith("fake-")
        assert await _status(uow_factory, phq9.id) is InstanceStatus.SENT
        ((destination, message),) = sender.sent
        assert destination == "avery.quinn@example.test"
        assert message.link == f"https://mbc.example.test/q/{phq9.token}"
        assert message.subject == "Complete Your PHQ-9 Assessment"

        (event,) = await audit_logger.search(event_type="LINK_SENT")
        assert event.metadata["message_id"] == result.message_id
        assert event.metadata["source"] == "manual"
        assert event.actor_id is None

    @pytest.mark.asyncio
    async def test_failed_delivery_leaves_instance_pending(
        self, uow_factory, lifecycle, generator, patient, clock, audit_logger
    ):
        phq9, _ = await generator.generate_instances(patient.id)

        for failing in (RejectingSender(), ExplodingSender()):
            result = await _dispatcher(uow_factory, lifecycle, failing, clock).dispatch(phq9.id)
            assert not result.success
            assert result.error in ("mailbox unavailable", "provider timeout")

        assert await _status(uow_factory, phq9.id) is InstanceStatus.PENDING
        assert await audit_logger.search(event_type="LINK_SENT") == []

    @pytest.mark.asyncio
    async def test_patient_without_email(self, dispatcher, generator, uow_factory, seeded):
        patient = Patient(first_name="No", last_name="Email")
        async with uow_factory() as uow:
            await uow.patients.create(patient)
        phq9, _ = await generator.generate_instances(patient.id)

        with pytest.raises(ValidationFailedError, match="no email"):
            await dispatcher.dispatch(phq9.id)

    @pytest.mark.asyncio
    async def test_dead_links_are_not_sent(
        self, dispatcher, sender, lifecycle, generator, patient, clock
    ):
        phq9, gad7 = await generator.generate_instances(patient.id)
        await lifecycle.cancel(gad7.id)

        with pytest.raises(InstanceCancelledError):
            await dispatcher.dispatch(gad7.id)

        clock.advance(days=7)
        with pytest.raises(InstanceExpiredError):
            await dispatcher.dispatch(phq9.id)
        assert sender.sent == []

    @pytest.mark.asyncio
    async def test_sending_a_dead_link_records_expiry(
        self, dispatcher, generator, patient, clock, uow_factory, audit_logger
    ):
        phq9, _ = await generator.generate_instances(patient.id)
        clock.advance(days=8)

        for _ in range(2):
            with pytest.raises(InstanceExpiredError):
                await dispatcher.dispatch(phq9.id)

        assert await _status(uow_factory, phq9.id) is InstanceStatus.EXPIRED
        (event,) = await audit_logger.search(event_type="INSTANCE_EXPIRED")
        assert event.resource_id == str(phq9.id)
        assert event.metadata["source"] == "send"


@pytest.mark.integration
class TestSendPendingNotifications:
    @pytest.mark.asyncio
    async def test_batch_sends_reachable_pending_instances_coming_due(
        self, dispatcher, sender, generator, patient, uow_factory
    ):
        due_now = await generator.generate_instances(patient.id)
        later = await generator.generate_instances(patient.id, due_date=T0 + timedelta(days=3))
        unreachable = Patient(first_name="Kai", last_name="Moss")
        async with uow_factory() as uow:
            await uow.patients.create(unreachable)
        await generator.generate_instances(unreachable.id)

        summary = await dispatcher.send_pending_notifications()

        assert (summary["total"], summary["sent"], summary["failed"]) == (2, 2, 0)
        assert {r["instance_id"] for r in summary["results"]} == {str(i.id) for i in due_now}
        assert all(r["success"] for r in summary["results"])
        for instance in due_now:
            assert await _status(uow_factory, instance.id) is InstanceStatus.SENT
        for instance in later:
            assert await _status(uow_factory, instance.id) is InstanceStatus.PENDING
        assert len(sender.sent) == 2

        # Already SENT, so a second run has nothing to do
        rerun = await dispatcher.send_pending_notifications()
        assert rerun["total"] == 0

    @pytest.mark.asyncio
    async def test_batch_reports_failures_and_retries_next_run(
        self, uow_factory, lifecycle, generator, patient, clock, audit_logger
    ):
        await generator.generate_instances(patient.id)

        failing = _dispatcher(uow_factory, lifecycle, RejectingSender(), clock)
        summary = await failing.send_pending_notifications()
        assert (summary["sent"], summary["failed"]) == (0, 2)
        assert all(r["error"] == "mailbox unavailable" for r in summary["results"])

        working = _dispatcher(uow_factory, lifecycle, LoggingNotificationSender(), clock)
        retry = await working.send_pending_notifications()
        assert (retry["sent"], retry["failed"]) == (2, 0)

        events = await audit_logger.search(event_type="LINK_SENT")
        assert len(events) == 2
        assert all(e.actor_id == "system" and e.metadata["source"] == "batch" for e in events)
