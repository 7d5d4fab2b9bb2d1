"""Integration tests for the HTTP API with in-memory storage and a fake model."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from case_care_service.api.dependencies import (
    get_analysis_orchestrator,
    get_case_repository,
    get_model_client,
    get_transcription_service,
)
from case_care_service.exceptions import UpstreamServiceError
from case_care_service.infrastructure.persistence import InMemoryCaseRepository
from case_care_service.main import app
from case_care_service.services import TranscriptionService
from conftest import FakeModelClient, make_orchestrator

FEVER_CASE = {
    "title": "Fever",
    "patientName": "Jane Roe",
    "patientAge": 30,
    "clinicalNotes": "Temp 101F",
    "transcript": "I feel hot and tired",
}


class DeferredOrchestrator:
    """Records scheduled case ids without analysing them."""

    def __init__(self):
        self.scheduled = []

    async def run_analysis(self, case_id):
        self.scheduled.append(case_id)


@pytest.fixture
def repository():
    return InMemoryCaseRepository()


@pytest.fixture
def api(repository):
    """Build a test client wired to ``repository`` and a swappable model client."""

    def build(model_client=None, orchestrator=None):
        model_client = model_client or FakeModelClient()
        app.dependency_overrides[get_case_repository] = lambda: repository
        app.dependency_overrides[get_model_client] = lambda: model_client
        app.dependency_overrides[get_analysis_orchestrator] = lambda: (
            orchestrator or make_orchestrator(repository, model_client)
        )
        return TestClient(app)

    yield build
    app.dependency_overrides.clear()


@pytest.mark.integration
class TestCreateCase:
    def test_returns_pending_case(self, api):
        client = api(orchestrator=DeferredOrchestrator())

        response = client.post("/api/cases", json={**FEVER_CASE, "status": "completed"})

        assert response.status_code == 201
        body = response.json()
        assert isinstance(body["id"], int)
        assert body["status"] == "pending"
        assert body["patientName"] == "Jane Roe"
        assert body["patientAge"] == 30
        assert "insight" not in body

    def test_schedules_one_analysis(self, api):
        orchestrator = DeferredOrchestrator()
        client = api(orchestrator=orchestrator)

        created = client.post("/api/cases", json=FEVER_CASE).json()

        assert orchestrator.scheduled == [created["id"]]

    def test_analysis_completes_with_insight(self, api):
        model_client = FakeModelClient()
        client = api(model_client=model_client)

        created = client.post("/api/cases", json=FEVER_CASE).json()
        case = client.get(f"/api/cases/{created['id']}").json()

        assert case["status"] == "completed"
        assert case["insight"]["caseId"] == created["id"]
        assert len(case["insight"]["questions"]) == 3
        assert case["insight"]["blindSpots"]
        assert case["insight"]["originalLanguage"] == "English"
        assert len(model_client.prompts) == 1
        assert "Jane Roe" in model_client.prompts[0]

    def test_analysis_failure_marks_case_failed(self, api):
        client = api(model_client=FakeModelClient(error=UpstreamServiceError("quota exceeded")))

        created = client.post("/api/cases", json=FEVER_CASE).json()
        response = client.get(f"/api/cases/{created['id']}")

        assert response.status_code == 200
        assert response.json()["status"] == "failed"
        assert response.json()["insight"] is None
        assert "Retry-After" not in response.headers

    def test_missing_age_is_null(self, api):
        client = api(orchestrator=DeferredOrchestrator())

        body = client.post("/api/cases", json={"title": "Cough", "patientName": "Sam"}).json()

        assert body["patientAge"] is None
        assert body["clinicalNotes"] is None

    def test_numeric_string_age_is_coerced(self, api):
        client = api(orchestrator=DeferredOrchestrator())

        body = client.post("/api/cases", json={**FEVER_CASE, "patientAge": "30"}).json()

        assert body["patientAge"] == 30

    @pytest.mark.parametrize(
        "payload, field",
        [
            ({**FEVER_CASE, "patientAge": -1}, "patientAge"),
            ({**FEVER_CASE, "title": ""}, "title"),
            ({"title": "Fever"}, "patientName"),
            ({**FEVER_CASE, "patientAge": 151}, "patientAge"),
            ({**FEVER_CASE, "patientAge": 10**20}, "patientAge"),
        ],
    )
    def test_invalid_payload_is_rejected(self, api, payload, field):
        orchestrator = DeferredOrchestrator()
        client = api(orchestrator=orchestrator)

        response = client.post("/api/cases", json=payload)

        assert response.status_code == 400
        assert response.json()["field"] == field
        assert response.json()["message"]
        assert client.get("/api/cases").json() == []
        assert orchestrator.scheduled == []


@pytest.mark.integration
class TestReadCases:
    def test_round_trip_while_pending(self, api):
        client = api(orchestrator=DeferredOrchestrator())
        created = client.post("/api/cases", json=FEVER_CASE).json()

        listed = client.get("/api/cases").json()
        response = client.get(f"/api/cases/{created['id']}")

        assert [c["id"] for c in listed] == [created["id"]]
        assert listed[0]["status"] == "pending"
        assert response.json()["insight"] is None
        assert response.headers["Retry-After"] == "5"

    def test_list_is_newest_first(self, api):
        client = api(orchestrator=DeferredOrchestrator())
        ids = [
            client.post("/api/cases", json={**FEVER_CASE, "title": title}).json()["id"]
            for title in ("first", "second", "third")
        ]

        listed = client.get("/api/cases").json()

        assert [c["id"] for c in listed] == list(reversed(ids))

    def test_empty_list(self, api):
        assert api().get("/api/cases").json() == []

    def test_reads_are_idempotent(self, api):
        client = api()
        created = client.post("/api/cases", json=FEVER_CASE).json()

        first = client.get(f"/api/cases/{created['id']}").json()
        second = client.get(f"/api/cases/{created['id']}").json()

        assert first == second

    def test_unknown_case(self, api):
        response = api().get("/api/cases/999")

        assert response.status_code == 404
        assert response.json() == {"message": "Case 999 not found", "field": None}

    def test_non_integer_id(self, api):
        response = api().get("/api/cases/abc")

        assert response.status_code == 400
        assert response.json()["field"] == "case_id"


@pytest.mark.integration
class TestDeleteCase:
    def test_delete_removes_case_and_insight(self, api, repository):
        client = api()
        created = client.post("/api/cases", json=FEVER_CASE).json()

        response = client.delete(f"/api/cases/{created['id']}")

        assert response.status_code == 204
        assert response.content == b""
        assert client.get(f"/api/cases/{created['id']}").status_code == 404
        assert client.get("/api/cases").json() == []
        assert asyncio.run(repository.get_insight_by_case_id(created["id"])) is None

    def test_delete_unknown_case(self, api):
        assert api().delete("/api/cases/999").status_code == 404


@pytest.mark.integration
class TestTranscribe:
    def test_transcribes_audio(self, api):
        model_client = FakeModelClient(transcript="I have had a headache for three days.")
        client = api(model_client=model_client)

        response = client.post(
            "/api/transcribe",
            files={"file": ("note.wav", b"RIFF....WAVE", "audio/wav")},
        )

        assert response.status_code == 200
        assert response.json() == {"text": "I have had a headache for three days."}
        assert model_client.transcriptions[0][1:] == (b"RIFF....WAVE", "audio/wav")

    def test_rejects_non_audio_without_calling_model(self, api):
        model_client = FakeModelClient()
        client = api(model_client=model_client)

        response = client.post(
            "/api/transcribe",
            files={"file": ("note.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json()["field"] == "file"
        assert model_client.transcriptions == []

    def test_rejects_missing_file(self, api):
        response = api().post("/api/transcribe", data={"note": "no file here"})

        assert response.status_code == 400
        assert response.json()["message"] == "No file uploaded"

    def test_rejects_oversized_file(self, api):
        model_client = FakeModelClient()
        client = api(model_client=model_client)
        app.dependency_overrides[get_transcription_service] = lambda: TranscriptionService(
            model_client, max_bytes=4
        )

        response = client.post(
            "/api/transcribe",
            files={"file": ("note.wav", b"0123456789", "audio/wav")},
        )

        assert response.status_code == 400
        assert "too large" in response.json()["message"]
        assert model_client.transcriptions == []

    def test_upstream_failure(self, api):
        client = api(model_client=FakeModelClient(error=UpstreamServiceError("quota exceeded")))

        response = client.post(
            "/api/transcribe",
            files={"file": ("note.wav", b"RIFF....WAVE", "audio/wav")},
        )

        assert response.status_code == 500
        assert response.json() == {"message": "Failed to transcribe audio", "field": None}


@pytest.mark.integration
def test_health(api):
    response = api().get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "case-care-service"
    assert body["database"] == "inmemory"
