"""
Integration tests for InstanceGenerator: policy arithmetic, per-encounter
idempotence and the upcoming-encounter batch.
"""

import asyncio
from datetime import timedelta
from uuid import uuid4

import pytest

from mbc_tracker.application.services import InstanceGenerator
from mbc_tracker.domain.entities.assessment_instance import InstanceStatus
from mbc_tracker.domain.entities.encounter import Encounter, EncounterStatus
from mbc_tracker.domain.entities.patient import Patient
from mbc_tracker.domain.entities.policy import Policy
from mbc_tracker.domain.exceptions import EntityNotFoundError, ValidationFailedError
from mbc_tracker.tests.conftest import T0


async def _encounter(uow_factory, patient, days_ahead, status=EncounterStatus.SCHEDULED):
    encounter = Encounter(
        patient_id=patient.id, scheduled_at=T0 + timedelta(days=days_ahead), status=status
    )
    async with uow_factory() as uow:
        await uow.encounters.create(encounter)
    return encounter


@pytest.mark.integration
class TestGenerateInstances:
    @pytest.mark.asyncio
    async def test_one_pending_instance_per_required_measure(self, generator, patient):
        created = await generator.generate_instances(patient.id)

        assert [i.measure_name for i in created] == ["PHQ-9", "GAD-7"]
        for instance in created:
            assert instance.status is InstanceStatus.PENDING
            assert instance.due_date == T0
            assert instance.expires_at == T0 + timedelta(days=7)
            assert instance.encounter_id is None
        assert created[0].token != created[1].token

    @pytest.mark.asyncio
    async def test_expiry_follows_policy_for_explicit_due_date(self, generator, patient):
        due = T0 + timedelta(days=5, hours=3)
        created = await generator.generate_instances(patient.id, due_date=due)
        assert all(i.expires_at - i.due_date == timedelta(days=7) for i in created)

    @pytest.mark.asyncio
    async def test_naive_due_date_is_treated_as_utc(self, generator, patient):
        naive = T0.replace(tzinfo=None)
        created = await generator.generate_instances(patient.id, due_date=naive)

        for instance in created:
            assert instance.due_date == T0
            assert instance.due_date.tzinfo is not None
            assert instance.due_date + timedelta(days=7) == instance.expires_at

    @pytest.mark.asyncio
    async def test_instances_persisted_and_audited(
        self, generator, patient, uow_factory, audit_logger
    ):
        created = await generator.generate_instances(patient.id, actor_id="clinician-1")

        async with uow_factory() as uow:
            stored = await uow.instances.list_for_patient(patient.id)
        assert {i.id for i in stored} == {i.id for i in created}

        events = await audit_logger.search(event_type="INSTANCE_CREATED")
        assert len(events) == 2
        assert {e.resource_id for e in events} == {str(i.id) for i in created}
        assert all(e.actor_id == "clinician-1" for e in events)
        assert all(e.patient_id == str(patient.id) for e in events)
        assert {e.metadata["measure_name"] for e in events} == {"PHQ-9", "GAD-7"}

    @pytest.mark.asyncio
    async def test_idempotent_per_encounter(self, generator, patient, uow_factory):
        encounter = await _encounter(uow_factory, patient, 2)

        first = await generator.generate_instances(
            patient.id, encounter_id=encounter.id, due_date=encounter.scheduled_at
        )
        second = await generator.generate_instances(
            patient.id, encounter_id=encounter.id, due_date=encounter.scheduled_at
        )

        assert len(first) == 2
        assert second == []
        async with uow_factory() as uow:
            assert len(await uow.instances.list_for_encounter(encounter.id)) == 2

    @pytest.mark.asyncio
    async def test_concurrent_runs_for_one_encounter_create_one_set(
        self, generator, patient, uow_factory
    ):
        encounter = await _encounter(uow_factory, patient, 1)

        results = await asyncio.gather(
            *(generator.generate_instances(patient.id, encounter_id=encounter.id) for _ in range(3))
        )

        assert sum(len(r) for r in results) == 2
        async with uow_factory() as uow:
            assert len(await uow.instances.list_for_encounter(encounter.id)) == 2

    @pytest.mark.asyncio
    async def test_rounds_without_encounter_are_not_deduplicated(self, generator, patient):
        await generator.generate_instances(patient.id)
        again = await generator.generate_instances(patient.id)
        assert len(again) == 2

    @pytest.mark.asyncio
    async def test_unknown_patient(self, generator, seeded):
        with pytest.raises(EntityNotFoundError):
            await generator.generate_instances(uuid4())

    @pytest.mark.asyncio
    async def test_encounter_of_another_patient(self, generator, patient, uow_factory):
        other = Patient(first_name="Rowan", last_name="Lee")
        async with uow_factory() as uow:
            await uow.patients.create(other)
        encounter = await _encounter(uow_factory, other, 1)

        with pytest.raises(EntityNotFoundError):
            await generator.generate_instances(patient.id, encounter_id=encounter.id)

    @pytest.mark.asyncio
    async def test_unknown_measure_creates_nothing(
        self, uow_factory, patient, scorer, audit_logger, clock
    ):
        policy = Policy("default", 14, 3, 7, ["PHQ-9", "BDI-II"])
        generator = InstanceGenerator(uow_factory, policy, scorer, audit_logger, clock=clock)

        with pytest.raises(ValidationFailedError):
            await generator.generate_instances(patient.id)

        async with uow_factory() as uow:
            assert await uow.instances.list_for_patient(patient.id) == []

    @pytest.mark.asyncio
    async def test_missing_catalog_measure_is_created_on_demand(
        self, uow_factory, scorer, audit_logger, clock, policy
    ):
        patient = Patient(first_name="Sam", last_name="Ortiz")
        async with uow_factory() as uow:
            await uow.patients.create(patient)
        generator = InstanceGenerator(uow_factory, policy, scorer, audit_logger, clock=clock)

        created = await generator.generate_instances(patient.id)

        assert len(created) == 2
        async with uow_factory() as uow:
            assert {m.name for m in await uow.measures.list_all()} == {"PHQ-9", "GAD-7"}


@pytest.mark.integration
class TestIntakeAndRecurring:
    @pytest.mark.asyncio
    async def test_intake_due_now(self, generator, patient):
        created = await generator.create_intake_assessments(patient.id)
        assert len(created) == 2
        assert all(i.due_date == T0 for i in created)

    @pytest.mark.asyncio
    async def test_intake_skipped_when_policy_does_not_require_it(
        self, uow_factory, patient, scorer, audit_logger, clock
    ):
        policy = Policy("default", 14, 3, 7, ["PHQ-9"], require_at_intake=False)
        generator = InstanceGenerator(uow_factory, policy, scorer, audit_logger, clock=clock)
        assert await generator.create_intake_assessments(patient.id) == []

    @pytest.mark.asyncio
    async def test_next_round_due_one_cadence_out(self, generator, patient):
        created = await generator.schedule_next_assessments(patient.id)
        assert all(i.due_date == T0 + timedelta(days=14) for i in created)
        assert all(i.expires_at == T0 + timedelta(days=21) for i in created)


@pytest.mark.integration
class TestGenerateUpcoming:
    @pytest.mark.asyncio
    async def test_only_uncovered_encounters_in_window(self, generator, patient, uow_factory):
        fresh = await _encounter(uow_factory, patient, 2)
        covered = await _encounter(uow_factory, patient, 1)
        await generator.generate_instances(patient.id, encounter_id=covered.id)
        await _encounter(uow_factory, patient, 3, status=EncounterStatus.CANCELLED)
        await _encounter(uow_factory, patient, 10)

        result = await generator.generate_upcoming(7)

        assert result.encounters_processed == 1
        assert result.instances_created == 2
        assert result.failures == []
        async with uow_factory() as uow:
            instances = await uow.instances.list_for_encounter(fresh.id)
        assert all(i.due_date == fresh.scheduled_at for i in instances)

        rerun = await generator.generate_upcoming(7)
        assert (rerun.encounters_processed, rerun.instances_created) == (0, 0)

    @pytest.mark.asyncio
    async def test_failures_reported_per_encounter(
        self, uow_factory, patient, scorer, audit_logger, clock
    ):
        encounter = await _encounter(uow_factory, patient, 1)
        policy = Policy("default", 14, 3, 7, ["NOT-A-MEASURE"])
        generator = InstanceGenerator(uow_factory, policy, scorer, audit_logger, clock=clock)

        result = await generator.generate_upcoming(7)

        assert result.encounters_processed == 0
        assert result.failures[0]["encounter_id"] == str(encounter.id)
        assert "Unknown measure" in result.failures[0]["error"]
