"""
API tests for patient enrollment and the magic-link questionnaire.
"""

from uuid import UUID

import pytest

from mbc_tracker.tests.conftest import T0


async def _register(client, api) -> dict:
    response = await client.post(
        f"{api}/patients",
        json={"first_name": "Avery", "last_name": "Quinn", "email": "avery@example.test"},
    )
    assert response.status_code == 201
    return response.json()


async def _tokens(uow_factory, patient_id: str) -> dict[str, str]:
    async with uow_factory() as uow:
        instances = await uow.instances.list_for_patient(UUID(patient_id))
    return {instance.measure_name: instance.token for instance in instances}


def _answers(values: list[int]) -> list[dict]:
    return [{"questionNum": n, "value": v} for n, v in enumerate(values, start=1)]


@pytest.mark.integration
class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "environment": "test"}


@pytest.mark.integration
class TestRegistration:
    @pytest.mark.asyncio
    async def test_register_creates_intake_instances(self, client, api):
        body = await _register(client, api)

        assert body["full_name"] == "Avery Quinn"
        intake = body["intake_instances"]
        assert [i["measure_name"] for i in intake] == ["PHQ-9", "GAD-7"]
        assert all(i["status"] == "PENDING" for i in intake)
        assert all("token" not in i for i in intake)

    @pytest.mark.asyncio
    async def test_missing_name_is_rejected(self, client, api):
        response = await client.post(f"{api}/patients", json={"first_name": "Avery"})
        assert response.status_code == 422


@pytest.mark.integration
class TestQuestionnaire:
    @pytest.mark.asyncio
    async def test_open_serves_questions_and_records_start(
        self, client, api, uow_factory, audit_logger
    ):
        body = await _register(client, api)
        tokens = await _tokens(uow_factory, body["id"])

        response = await client.get(
            f"{api}/questionnaire/{tokens['PHQ-9']}",
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "User-Agent": "pytest-browser"},
        )

        assert response.status_code == 200
        view = response.json()
        assert view["status"] == "STARTED"
        assert view["patient_first_name"] == "Avery"
        assert view["measure_name"] == "PHQ-9"
        assert len(view["questions"]) == 9
        assert view["questions"][0]["number"] == 1

        (event,) = await audit_logger.search(event_type="QUESTIONNAIRE_STARTED")
        assert event.ip_address == "203.0.113.7"
        assert event.user_agent == "pytest-browser"

    @pytest.mark.asyncio
    async def test_submit_scores_and_closes_the_link(self, client, api, uow_factory):
        body = await _register(client, api)
        token = (await _tokens(uow_factory, body["id"]))["PHQ-9"]

        response = await client.post(
            f"{api}/questionnaire/{token}", json={"answers": _answers([1] * 9)}
        )

        assert response.status_code == 200
        result = response.json()
        assert result["status"] == "COMPLETED"
        assert result["total_score"] == 9
        assert result["severity_label"] == "mild"
        assert result["max_possible_score"] == 27

        resubmit = await client.post(
            f"{api}/questionnaire/{token}", json={"answers": _answers([0] * 9)}
        )
        assert resubmit.status_code == 409
        assert resubmit.json()["code"] == "already_completed"

        reopen = await client.get(f"{api}/questionnaire/{token}")
        assert reopen.status_code == 409
        assert "questions" not in reopen.json()

    @pytest.mark.asyncio
    async def test_snake_case_answers_are_accepted(self, client, api, uow_factory):
        body = await _register(client, api)
        token = (await _tokens(uow_factory, body["id"]))["GAD-7"]

        answers = [{"question_num": n, "value": 3} for n in range(1, 8)]
        response = await client.post(f"{api}/questionnaire/{token}", json={"answers": answers})

        assert response.status_code == 200
        assert response.json()["severity_label"] == "severe"

    @pytest.mark.asyncio
    async def test_expired_link_is_gone(self, client, api, uow_factory, clock):
        body = await _register(client, api)
        token = (await _tokens(uow_factory, body["id"]))["PHQ-9"]
        clock.advance(days=7)

        for _ in range(2):
            response = await client.get(f"{api}/questionnaire/{token}")
            assert response.status_code == 410
            assert response.json()["code"] == "expired"

        submit = await client.post(
            f"{api}/questionnaire/{token}", json={"answers": _answers([0] * 9)}
        )
        assert submit.status_code == 410

    @pytest.mark.asyncio
    async def test_unknown_token(self, client, api):
        response = await client.get(f"{api}/questionnaire/not-a-real-token")
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    @pytest.mark.asyncio
    async def test_invalid_answers(self, client, api, uow_factory):
        body = await _register(client, api)
        token = (await _tokens(uow_factory, body["id"]))["PHQ-9"]

        short = await client.post(f"{api}/questionnaire/{token}", json={"answers": _answers([1] * 8)})
        assert short.status_code == 400
        assert short.json()["code"] == "validation_failed"

        out_of_range = await client.post(
            f"{api}/questionnaire/{token}", json={"answers": _answers([4] + [0] * 8)}
        )
        assert out_of_range.status_code == 400

        empty = await client.post(f"{api}/questionnaire/{token}", json={"answers": []})
        assert empty.status_code == 422

        # Rejected submissions leave the link usable
        opened = await client.get(f"{api}/questionnaire/{token}")
        assert opened.status_code == 200


@pytest.mark.integration
class TestProgressEndpoint:
    @pytest.mark.asyncio
    async def test_progress_after_submission(self, client, api, uow_factory):
        body = await _register(client, api)
        token = (await _tokens(uow_factory, body["id"]))["PHQ-9"]
        await client.post(f"{api}/questionnaire/{token}", json={"answers": _answers([2] * 9)})

        response = await client.get(
            f"{api}/patients/{body['id']}/progress", params={"actor_id": "dr-1"}
        )

        assert response.status_code == 200
        view = response.json()
        assert view["response_count"] == 1
        (point,) = view["measures"]["PHQ-9"]["data"]
        assert point["score"] == 18
        assert [p["measure_name"] for p in view["pending"]] == ["GAD-7"]

    @pytest.mark.asyncio
    async def test_unknown_patient(self, client, api):
        response = await client.get(f"{api}/patients/00000000-0000-0000-0000-000000000000/progress")
        assert response.status_code == 404


@pytest.mark.integration
class TestEncounters:
    @pytest.mark.asyncio
    async def test_schedule_and_cancel(self, client, api):
        body = await _register(client, api)

        created = await client.post(
            f"{api}/patients/{body['id']}/encounters",
            json={"scheduled_at": "2024-06-06T09:00:00Z", "reason": "follow-up"},
        )
        assert created.status_code == 201
        encounter = created.json()
        assert encounter["status"] == "SCHEDULED"

        cancelled = await client.post(
            f"{api}/patients/{body['id']}/encounters/{encounter['id']}/cancel"
        )
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "CANCELLED"
        assert cancelled.json()["cancelled_at"].startswith(T0.date().isoformat())
