"""
Integration tests for patient enrollment, encounter scheduling and the
clinician progress view.
"""

from datetime import date, timedelta
from uuid import uuid4

import pytest

from mbc_tracker.application.services import EnrollmentService, ProgressService
from mbc_tracker.domain.entities.encounter import EncounterStatus
from mbc_tracker.domain.entities.patient import Patient
from mbc_tracker.domain.exceptions import EntityNotFoundError, ValidationFailedError
from mbc_tracker.tests.conftest import T0, answers_for


@pytest.fixture
def enrollment(uow_factory, generator, audit_logger, clock) -> EnrollmentService:
    return EnrollmentService(uow_factory, generator, audit_logger, clock=clock)


@pytest.fixture
def progress(uow_factory, audit_logger, clock) -> ProgressService:
    return ProgressService(uow_factory, audit_logger, clock=clock)


@pytest.mark.integration
class TestEnrollment:
    @pytest.mark.asyncio
    async def test_register_runs_intake(self, enrollment, uow_factory, audit_logger, seeded):
        result = await enrollment.register_patient(
            " Jordan ",
            "Blake",
            email="jordan@example.test",
            date_of_birth=date(1990, 4, 1),
            actor_id="dr-1",
        )

        assert result.patient.full_name == "Jordan Blake"
        assert [i.measure_name for i in result.intake_instances] == ["PHQ-9", "GAD-7"]
        async with uow_factory() as uow:
            stored = await uow.patients.get_by_id(result.patient.id)
        assert stored.email == "jordan@example.test"
        assert stored.date_of_birth == date(1990, 4, 1)

        (event,) = await audit_logger.search(event_type="PATIENT_CREATED")
        assert event.patient_id == str(result.patient.id)
        assert event.actor_id == "dr-1"

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, enrollment, seeded):
        with pytest.raises(ValidationFailedError):
            await enrollment.register_patient("  ", "Blake")

    @pytest.mark.asyncio
    async def test_scheduled_encounter_feeds_upcoming_generation(
        self, enrollment, generator, patient, audit_logger
    ):
        encounter = await enrollment.schedule_encounter(
            patient.id, T0 + timedelta(days=3), reason="follow-up", actor_id="dr-2"
        )

        result = await generator.generate_upcoming(7)

        assert result.instances_created == 2
        (event,) = await audit_logger.search(event_type="APPOINTMENT_CREATED")
        assert event.resource_id == str(encounter.id)
        assert event.metadata == {"scheduled_at": "2024-06-06T09:00:00Z"}

    @pytest.mark.asyncio
    async def test_schedule_for_unknown_patient(self, enrollment, seeded):
        with pytest.raises(EntityNotFoundError):
            await enrollment.schedule_encounter(uuid4(), T0)

    @pytest.mark.asyncio
    async def test_cancel_encounter_is_idempotent(
        self, enrollment, generator, patient, audit_logger
    ):
        encounter = await enrollment.schedule_encounter(patient.id, T0 + timedelta(days=2))

        first = await enrollment.cancel_encounter(encounter.id, patient_id=patient.id)
        second = await enrollment.cancel_encounter(encounter.id)

        assert first.status is EncounterStatus.CANCELLED
        assert second.cancelled_at == T0
        assert len(await audit_logger.search(event_type="APPOINTMENT_CANCELLED")) == 1
        assert (await generator.generate_upcoming(7)).encounters_processed == 0

    @pytest.mark.asyncio
    async def test_cancel_encounter_of_another_patient(
        self, enrollment, patient, uow_factory
    ):
        encounter = await enrollment.schedule_encounter(patient.id, T0 + timedelta(days=2))
        other = Patient(first_name="Rowan", last_name="Lee")
        async with uow_factory() as uow:
            await uow.patients.create(other)

        with pytest.raises(EntityNotFoundError):
            await enrollment.cancel_encounter(encounter.id, patient_id=other.id)


@pytest.mark.integration
class TestPatientProgress:
    @pytest.mark.asyncio
    async def test_history_trend_and_pending(
        self, progress, generator, lifecycle, patient, clock, audit_logger
    ):
        phq9, gad7 = await generator.generate_instances(patient.id)
        await lifecycle.submit(phq9.token, answers_for([3] * 6 + [2] * 3))
        clock.advance(days=14)
        (next_phq9, _) = await generator.generate_instances(patient.id)
        await lifecycle.submit(next_phq9.token, answers_for([1] * 9))

        view = await progress.patient_progress(patient.id, actor_id="dr-1")

        assert view["patient"] == {"id": str(patient.id), "name": "Avery Quinn"}
        assert view["response_count"] == 2
        phq9_history = view["measures"]["PHQ-9"]
        assert [point["score"] for point in phq9_history["data"]] == [24, 9]
        assert phq9_history["trend"] == "improving"
        assert phq9_history["latest_band"] == "mild"
        assert phq9_history["latest_description"] == "Mild symptoms"
        assert "GAD-7" not in view["measures"]

        # The first GAD-7 link is dead even though the sweep has not run
        assert [p["measure_name"] for p in view["pending"]] == ["GAD-7"]
        assert view["pending"][0]["instance_id"] != str(gad7.id)

        (event,) = await audit_logger.search(event_type="CLINICIAN_VIEWED_CHART")
        assert event.actor_id == "dr-1"

    @pytest.mark.asyncio
    async def test_unknown_patient(self, progress, seeded):
        with pytest.raises(EntityNotFoundError):
            await progress.patient_progress(uuid4())
