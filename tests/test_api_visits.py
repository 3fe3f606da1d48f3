"""
Visit, queue and voice API tests.
"""

import json

import pytest
from fastapi.testclient import TestClient

from conftest import FakeTranscriptionService
from visitflow.api.deps import (
    get_action_tracker,
    get_app_settings,
    get_transcription_service,
    get_visit_repository,
)
from visitflow.app import app
from visitflow.core.config import Settings
from visitflow.core.exceptions import ExtractionFailedError

NURSE = {"X-Operator-ID": "nurse-1", "X-Operator-Role": "NURSE"}


@pytest.fixture
def client(repo, tracker):
    app.dependency_overrides[get_visit_repository] = lambda: repo
    app.dependency_overrides[get_action_tracker] = lambda: tracker
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _create(client, priority="NORMAL", complaint="Fever"):
    response = client.post(
        "/visits",
        json={"patient_id": "P-1", "chief_complaint": complaint, "priority": priority},
        headers=NURSE,
    )
    assert response.status_code == 201
    return response.json()["data"]


def _post(client, path, body=None):
    return client.post(path, json=body, headers=NURSE)


def test_create_visit(client):
    visit = _create(client, priority="urgent")
    assert visit["status"] == "CREATED"
    assert visit["priority"] == "URGENT"
    assert visit["visit_number"].startswith("APT-")
    assert "record_vitals" in visit["allowed_events"]
    assert "cancel" in visit["allowed_events"]


def test_create_visit_validation(client):
    response = _post(client, "/visits", {"patient_id": "P-1", "chief_complaint": "  "})
    assert response.status_code == 422
    assert response.json()["error"] == "INVALID_INPUT"

    response = _post(client, "/visits", {"patient_id": "P-1", "chief_complaint": "x", "priority": "CRITICAL"})
    assert response.status_code == 422


def test_full_lifecycle(client):
    visit_id = _create(client)["visit_id"]

    response = _post(client, f"/visits/{visit_id}/vitals", {"pulse_rate": 88, "temperature": 38.1})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "VITALS_RECORDED"
    assert data["vitals"]["pulse_rate"] == 88
    assert data["vitals"]["recorded_by"] == "nurse-1"
    assert data["vitals"]["recorded_via"] == "MANUAL"

    response = _post(client, f"/visits/{visit_id}/assign-doctor", {"doctor_id": "DR-1"})
    assert response.status_code == 200
    assert response.json()["data"]["assigned_doctor_id"] == "DR-1"

    for event, status in (
        ("enter-queue", "IN_QUEUE"),
        ("start-consultation", "IN_CONSULTATION"),
        ("send-to-pharmacy", "PENDING_PHARMACY"),
    ):
        response = _post(client, f"/visits/{visit_id}/events/{event}")
        assert response.status_code == 200, response.json()
        assert response.json()["data"]["status"] == status

    response = _post(client, f"/visits/{visit_id}/dispense", {"pharmacist_notes": "Twice daily"})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "COMPLETED"
    assert data["dispensed_at"] is not None
    assert data["allowed_events"] == []

    response = _post(client, f"/visits/{visit_id}/dispense")
    assert response.status_code == 409
    assert response.json()["error"] == "ALREADY_DISPENSED"


def test_referral_flow(client):
    visit_id = _create(client)["visit_id"]
    _post(client, f"/visits/{visit_id}/vitals", {"pulse_rate": 70})
    _post(client, f"/visits/{visit_id}/assign-doctor", {"doctor_id": "DR-1"})
    for event in ("enter-queue", "start-consultation", "refer"):
        assert _post(client, f"/visits/{visit_id}/events/{event}").status_code == 200

    response = _post(client, f"/visits/{visit_id}/events/resolve-referral")
    assert response.json()["data"]["status"] == "COMPLETED"


def test_assign_before_vitals_conflicts(client):
    visit_id = _create(client)["visit_id"]
    response = _post(client, f"/visits/{visit_id}/assign-doctor", {"doctor_id": "DR-1"})
    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "ILLEGAL_ASSIGNMENT"
    assert body["details"]["status"] == "CREATED"

    visit = client.get(f"/visits/{visit_id}", headers=NURSE).json()["data"]
    assert visit["assigned_doctor_id"] is None


def test_invalid_transition_conflicts(client):
    visit_id = _create(client)["visit_id"]
    response = _post(client, f"/visits/{visit_id}/events/start-consultation")
    assert response.status_code == 409
    assert response.json()["error"] == "INVALID_TRANSITION"


def test_unknown_event_is_rejected(client):
    visit_id = _create(client)["visit_id"]
    assert _post(client, f"/visits/{visit_id}/events/teleport").status_code == 422
    assert _post(client, f"/visits/{visit_id}/events/dispense").status_code == 422


def test_unknown_visit_is_404(client):
    response = client.get(f"/visits/{'0' * 32}", headers=NURSE)
    assert response.status_code == 404
    assert response.json()["error"] == "VISIT_NOT_FOUND"
    assert _post(client, "/visits/nope/vitals", {"pulse_rate": 70}).status_code == 404


def test_error_envelope_carries_request_id(client):
    response = client.get(f"/visits/{'0' * 32}", headers={**NURSE, "X-Request-ID": "req-123"})
    body = response.json()
    assert body["success"] is False
    assert body["request_id"] == "req-123"
    assert "visit_id" in body["details"]


def test_invalid_vitals_are_rejected(client):
    visit_id = _create(client)["visit_id"]
    response = _post(client, f"/visits/{visit_id}/vitals", {"oxygen_saturation": 140})
    assert response.status_code == 422
    visit = client.get(f"/visits/{visit_id}", headers=NURSE).json()["data"]
    assert visit["status"] == "CREATED"


def test_cancel_removes_visit_from_queue(client):
    visit_id = _create(client)["visit_id"]
    assert _post(client, f"/visits/{visit_id}/events/cancel").json()["data"]["status"] == "CANCELLED"
    assert _post(client, f"/visits/{visit_id}/events/cancel").status_code == 409

    queue = client.get("/queue", headers=NURSE).json()["data"]
    assert queue["entries"] == []


def test_queue_order_and_counts(client):
    normal = _create(client, "NORMAL", "Rash")["visit_id"]
    emergency = _create(client, "EMERGENCY", "Chest pain")["visit_id"]
    urgent = _create(client, "URGENT", "Fracture")["visit_id"]

    response = client.get("/queue", headers=NURSE)
    assert response.status_code == 200
    data = response.json()["data"]
    assert [entry["visit_id"] for entry in data["entries"]] == [emergency, urgent, normal]
    assert [entry["position"] for entry in data["entries"]] == [1, 2, 3]
    assert data["counts"] == {"total": 3, "emergency": 1, "urgent": 1, "normal": 1}


def test_queue_doctor_filter(client):
    mine = _create(client)["visit_id"]
    _create(client)
    _post(client, f"/visits/{mine}/vitals", {"pulse_rate": 70})
    _post(client, f"/visits/{mine}/assign-doctor", {"doctor_id": "DR-9"})

    data = client.get("/queue", params={"doctor_id": "DR-9"}, headers=NURSE).json()["data"]
    assert [entry["visit_id"] for entry in data["entries"]] == [mine]


def test_operator_header_is_validated(client):
    response = client.get("/queue", headers={"X-Operator-ID": "bad id!"})
    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_OPERATOR_ID"

    response = client.get("/queue", headers={"X-Operator-ID": "x", "X-Operator-Role": "JANITOR"})
    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_OPERATOR_ROLE"


def test_operator_header_required_in_strict_mode(client, monkeypatch):
    from visitflow.core.config import reset_settings

    monkeypatch.setenv("OPERATOR_REQUIRE_HEADER", "true")
    reset_settings()

    assert client.get("/queue").status_code == 400
    assert client.get("/queue", headers=NURSE).status_code == 200
    assert client.get("/health").status_code == 200


# ---------------------------------------------------------------------------
# Voice
# ---------------------------------------------------------------------------


@pytest.fixture
def voice_settings():
    settings = Settings()
    settings.openai.api_key = "sk-test"
    return settings


def _intake(client, form=None, context="intake"):
    return client.post(
        "/voice/intake",
        files={"audio": ("recording.webm", b"\x1a\x45\xdf\xa3" * 32, "audio/webm")},
        data={"form": json.dumps(form or {}), "context": context, "duration_seconds": "9"},
        headers=NURSE,
    )


def test_voice_status_without_key(client):
    data = client.get("/voice/status", headers=NURSE).json()["data"]
    assert data["ai_enabled"] is False
    assert "manual" in data["message"].lower()


def test_voice_status_with_key(client, voice_settings):
    app.dependency_overrides[get_app_settings] = lambda: voice_settings
    data = client.get("/voice/status", headers=NURSE).json()["data"]
    assert data["ai_enabled"] is True


def test_voice_intake_disabled_is_503(client):
    app.dependency_overrides[get_transcription_service] = lambda: None
    response = _intake(client)
    assert response.status_code == 503
    assert response.json()["error"] == "VOICE_DISABLED"


def test_voice_intake_merges_into_form(client, voice_settings):
    service = FakeTranscriptionService()
    app.dependency_overrides[get_app_settings] = lambda: voice_settings
    app.dependency_overrides[get_transcription_service] = lambda: service

    response = _intake(client, form={"pulseRate": 60, "weight": 80})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["form"] == {
        "pulseRate": 72,
        "weight": 80,
        "blood_pressure_systolic": 120,
        "blood_pressure_diastolic": 80,
    }
    assert data["confidence"] == 0.9
    assert data["audio_duration_seconds"] == 9
    artifact, _ = service.calls[0]
    assert artifact.mime_type == "audio/webm"
    assert artifact.filename == "recording"


def test_voice_intake_failure_is_502(client, voice_settings):
    service = FakeTranscriptionService(error=ExtractionFailedError("Transcription failed: timeout"))
    app.dependency_overrides[get_app_settings] = lambda: voice_settings
    app.dependency_overrides[get_transcription_service] = lambda: service

    response = _intake(client, form={"pulse_rate": 60})

    assert response.status_code == 502
    assert response.json()["error"] == "EXTRACTION_FAILED"


def test_voice_intake_rejects_non_object_form(client, voice_settings):
    app.dependency_overrides[get_app_settings] = lambda: voice_settings
    app.dependency_overrides[get_transcription_service] = lambda: FakeTranscriptionService()
    response = client.post(
        "/voice/intake",
        files={"audio": ("recording.webm", b"abc", "audio/webm")},
        data={"form": "[1, 2]"},
        headers=NURSE,
    )
    assert response.status_code == 422


def test_voice_intake_rejects_oversized_upload(client, voice_settings):
    service = FakeTranscriptionService()
    voice_settings.voice.max_audio_mb = 1
    app.dependency_overrides[get_app_settings] = lambda: voice_settings
    app.dependency_overrides[get_transcription_service] = lambda: service

    response = client.post(
        "/voice/intake",
        files={"audio": ("recording.webm", b"\x00" * (1024 * 1024 + 1), "audio/webm")},
        headers=NURSE,
    )

    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"
    assert "too large" in response.json()["message"]
    assert service.calls == []


def test_voice_intake_disabled_flag_wins_over_configured_service(client, voice_settings):
    service = FakeTranscriptionService()
    voice_settings.voice.enabled = False
    app.dependency_overrides[get_app_settings] = lambda: voice_settings
    app.dependency_overrides[get_transcription_service] = lambda: service

    response = _intake(client)

    assert response.status_code == 503
    assert response.json()["error"] == "VOICE_DISABLED"
    assert service.calls == []


def test_queue_counts_ignore_limit(client):
    _create(client, "EMERGENCY", "Chest pain")
    for _ in range(3):
        _create(client, "NORMAL", "Cough")

    data = client.get("/queue", params={"limit": 1}, headers=NURSE).json()["data"]

    assert len(data["entries"]) == 1
    assert data["entries"][0]["priority"] == "EMERGENCY"
    assert data["counts"] == {"total": 4, "emergency": 1, "urgent": 0, "normal": 3}
