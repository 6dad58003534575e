"""
Integration tests for the SQLAlchemy repositories against a real SQLite file.
"""

import asyncio
from datetime import timedelta

import pytest

from mbc_tracker.domain.entities.assessment_instance import (
    NON_TERMINAL_STATUSES,
    AssessmentInstance,
    InstanceStatus,
)
from mbc_tracker.domain.entities.audit_event import AuditEvent
from mbc_tracker.domain.entities.encounter import Encounter, EncounterStatus
from mbc_tracker.domain.entities.policy import Policy
from mbc_tracker.domain.exceptions import AlreadyScheduledError
from mbc_tracker.tests.conftest import T0


def _instance(patient, measure, encounter_id=None, due=T0, expires_in_days=7, token=None):
    return AssessmentInstance(
        patient_id=patient.id,
        measure_id=measure.id,
        encounter_id=encounter_id,
        token=token or f"tok-{measure.name}-{encounter_id}-{due.isoformat()}-{expires_in_days}",
        due_date=due,
        expires_at=due + timedelta(days=expires_in_days),
        measure_name=measure.name,
    )


@pytest.mark.integration
class TestPolicyRepository:
    @pytest.mark.asyncio
    async def test_get_or_create_inserts_once(self, uow_factory, policy):
        async with uow_factory() as uow:
            created = await uow.policies.get_or_create(policy)

        other_default = Policy("default", 30, 5, 10, ["GAD-7"])
        async with uow_factory() as uow:
            existing = await uow.policies.get_or_create(other_default)

        assert existing.id == created.id
        assert existing.cadence_days == 14
        assert existing.measures_required == ["PHQ-9", "GAD-7"]

    @pytest.mark.asyncio
    async def test_concurrent_first_access_converges(self, uow_factory):
        async def first_access(cadence):
            async with uow_factory() as uow:
                return await uow.policies.get_or_create(
                    Policy("shared", cadence, 3, 7, ["PHQ-9"])
                )

        results = await asyncio.gather(*(first_access(c) for c in (10, 11, 12)))

        assert len({p.id for p in results}) == 1
        assert len({p.cadence_days for p in results}) == 1


@pytest.mark.integration
class TestAssessmentInstanceRepository:
    @pytest.mark.asyncio
    async def test_duplicate_for_encounter_raises_already_scheduled(
        self, uow_factory, patient, seeded
    ):
        phq9 = seeded["PHQ-9"]
        encounter = Encounter(patient_id=patient.id, scheduled_at=T0)
        async with uow_factory() as uow:
            await uow.encounters.create(encounter)
            await uow.instances.add(_instance(patient, phq9, encounter.id, token="a"))
            with pytest.raises(AlreadyScheduledError):
                await uow.instances.add(_instance(patient, phq9, encounter.id, token="b"))

        async with uow_factory() as uow:
            stored = await uow.instances.list_for_encounter(encounter.id)
        assert [i.token for i in stored] == ["a"]

    @pytest.mark.asyncio
    async def test_instances_without_encounter_do_not_collide(self, uow_factory, patient, seeded):
        phq9 = seeded["PHQ-9"]
        async with uow_factory() as uow:
            await uow.instances.add(_instance(patient, phq9, token="first"))
            await uow.instances.add(_instance(patient, phq9, token="second"))
            assert not await uow.instances.exists_for(patient.id, seeded["GAD-7"].id, None)
            assert await uow.instances.exists_for(patient.id, phq9.id, None)

        async with uow_factory() as uow:
            assert len(await uow.instances.list_for_patient(patient.id)) == 2

    @pytest.mark.asyncio
    async def test_round_trip_keeps_aware_utc_datetimes(self, uow_factory, patient, seeded):
        instance = _instance(patient, seeded["GAD-7"], token="rt")
        async with uow_factory() as uow:
            await uow.instances.add(instance)

        async with uow_factory() as uow:
            stored = await uow.instances.get_by_token("rt")

        assert stored.id == instance.id
        assert stored.due_date == T0
        assert stored.expires_at == T0 + timedelta(days=7)
        assert stored.due_date.tzinfo is not None
        assert stored.measure_name == "GAD-7"
        assert stored.status is InstanceStatus.PENDING

    @pytest.mark.asyncio
    async def test_transition_is_conditional_on_prior_status(self, uow_factory, patient, seeded):
        instance = _instance(patient, seeded["PHQ-9"], token="t")
        async with uow_factory() as uow:
            await uow.instances.add(instance)

        async with uow_factory() as uow:
            first = await uow.instances.transition(
                instance.id, {InstanceStatus.PENDING}, InstanceStatus.SENT, T0, sent_at=T0
            )
            second = await uow.instances.transition(
                instance.id, {InstanceStatus.PENDING}, InstanceStatus.SENT, T0, sent_at=T0
            )

        assert (first, second) == (True, False)
        async with uow_factory() as uow:
            stored = await uow.instances.get_by_id(instance.id)
        assert stored.status is InstanceStatus.SENT
        assert stored.sent_at == T0

    @pytest.mark.asyncio
    async def test_transition_refuses_expired_rows(self, uow_factory, patient, seeded):
        instance = _instance(patient, seeded["PHQ-9"], token="late")
        async with uow_factory() as uow:
            await uow.instances.add(instance)

        after_expiry = T0 + timedelta(days=7)
        async with uow_factory() as uow:
            assert not await uow.instances.transition(
                instance.id, NON_TERMINAL_STATUSES, InstanceStatus.STARTED, after_expiry
            )
            assert await uow.instances.transition(
                instance.id,
                NON_TERMINAL_STATUSES,
                InstanceStatus.EXPIRED,
                after_expiry,
                require_unexpired=False,
            )

    @pytest.mark.asyncio
    async def test_expire_overdue_is_monotonic(self, uow_factory, patient, seeded):
        live = _instance(patient, seeded["PHQ-9"], token="live", expires_in_days=30)
        dead = _instance(patient, seeded["GAD-7"], token="dead", expires_in_days=2)
        async with uow_factory() as uow:
            await uow.instances.add(live)
            await uow.instances.add(dead)

        now = T0 + timedelta(days=3)
        async with uow_factory() as uow:
            first = await uow.instances.expire_overdue(now)
        async with uow_factory() as uow:
            second = await uow.instances.expire_overdue(now)

        assert first == [dead.id]
        assert second == []

    @pytest.mark.asyncio
    async def test_due_and_overdue_windows(self, uow_factory, patient, seeded):
        phq9, gad7 = seeded["PHQ-9"], seeded["GAD-7"]
        in_grace = _instance(patient, phq9, due=T0 - timedelta(days=2), token="grace")
        overdue = _instance(patient, gad7, due=T0 - timedelta(days=4), token="overdue")
        dead = _instance(
            patient, phq9, due=T0 - timedelta(days=10), expires_in_days=7, token="dead"
        )
        future = _instance(patient, gad7, due=T0 + timedelta(days=1), token="future")
        async with uow_factory() as uow:
            for instance in (in_grace, overdue, dead, future):
                await uow.instances.add(instance)

        async with uow_factory() as uow:
            due = await uow.instances.list_due(T0, 3)
            late = await uow.instances.list_overdue(T0, 3)
            pending_soon = await uow.instances.list_pending_due_before(T0 + timedelta(days=1), T0)

        assert [i.token for i in due] == ["grace"]
        assert [i.token for i in late] == ["overdue"]
        assert [i.token for i in pending_soon] == ["overdue", "grace", "future"]

    @pytest.mark.asyncio
    async def test_counts_exclude_cancelled(self, uow_factory, patient, seeded):
        instances = [
            _instance(patient, seeded["PHQ-9"], due=T0 - timedelta(days=d), token=f"c{d}")
            for d in (1, 2, 3)
        ]
        async with uow_factory() as uow:
            for instance in instances:
                await uow.instances.add(instance)
            await uow.instances.transition(
                instances[0].id, NON_TERMINAL_STATUSES, InstanceStatus.CANCELLED, T0
            )
            await uow.instances.transition(
                instances[1].id,
                NON_TERMINAL_STATUSES,
                InstanceStatus.COMPLETED,
                T0,
                completed_at=T0,
            )

        async with uow_factory() as uow:
            start = T0 - timedelta(days=30)
            assert await uow.instances.count_due_between(start, T0) == 2
            assert await uow.instances.count_completed_between(start, T0) == 1


@pytest.mark.integration
class TestEncounterRepository:
    @pytest.mark.asyncio
    async def test_upcoming_without_instances(self, uow_factory, patient, seeded):
        fresh = Encounter(patient_id=patient.id, scheduled_at=T0 + timedelta(days=2))
        generated = Encounter(patient_id=patient.id, scheduled_at=T0 + timedelta(days=1))
        cancelled = Encounter(
            patient_id=patient.id,
            scheduled_at=T0 + timedelta(days=3),
            status=EncounterStatus.CANCELLED,
        )
        too_late = Encounter(patient_id=patient.id, scheduled_at=T0 + timedelta(days=9))
        async with uow_factory() as uow:
            for encounter in (fresh, generated, cancelled, too_late):
                await uow.encounters.create(encounter)
            await uow.instances.add(_instance(patient, seeded["PHQ-9"], generated.id, token="g"))

        async with uow_factory() as uow:
            upcoming = await uow.encounters.list_upcoming_without_instances(
                T0, T0 + timedelta(days=7)
            )
            all_for_patient = await uow.encounters.list_for_patient(patient.id)

        assert [e.id for e in upcoming] == [fresh.id]
        assert [e.id for e in all_for_patient] == [generated.id, fresh.id, cancelled.id, too_late.id]


@pytest.mark.integration
class TestAuditEventRepository:
    @pytest.mark.asyncio
    async def test_search_filters_and_orders_newest_first(self, uow_factory):
        events = [
            AuditEvent(event_type="LINK_SENT", patient_id="p1", timestamp=T0),
            AuditEvent(
                event_type="LINK_SENT", patient_id="p1", timestamp=T0 + timedelta(hours=1)
            ),
            AuditEvent(event_type="INSTANCE_CREATED", patient_id="p2", timestamp=T0),
        ]
        async with uow_factory() as uow:
            for event in events:
                await uow.audit_events.add(event)

        async with uow_factory() as uow:
            by_patient = await uow.audit_events.search(patient_id="p1")
            by_type = await uow.audit_events.search(event_type="INSTANCE_CREATED")
            windowed = await uow.audit_events.search(start_time=T0 + timedelta(minutes=30))
            limited = await uow.audit_events.search(limit=1)

        assert [e.id for e in by_patient] == [events[1].id, events[0].id]
        assert [e.id for e in by_type] == [events[2].id]
        assert [e.id for e in windowed] == [events[1].id]
        assert len(limited) == 1


@pytest.mark.integration
class TestMeasureRepository:
    @pytest.mark.asyncio
    async def test_upsert_keeps_first_definition(self, uow_factory, seeded, scorer):
        async with uow_factory() as uow:
            again = await uow.measures.upsert(scorer.get_measure("PHQ-9"))
            by_name = await uow.measures.get_by_name("PHQ-9")
            everything = await uow.measures.list_all()

        assert again.id == seeded["PHQ-9"].id
        assert by_name.id == seeded["PHQ-9"].id
        assert len(by_name.questions) == 9
        assert by_name.band_for(12).label == "moderate"
        assert {m.name for m in everything} == {"PHQ-9", "GAD-7"}
