"""Tests for POST /api/user-status."""

from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from astrochat.app.exceptions import StorageUnavailableError
from astrochat.app.main import create_app
from astrochat.app.services.quota_tracker import QuotaTracker


def status(client, user_data):
    return client.post("/api/user-status", json={"userData": user_data})


def test_unknown_person_has_full_quota(client, user_data):
    resp = status(client, user_data)

    assert resp.status_code == 200
    assert resp.json() == {
        "questions_used": 0,
        "daily_limit": 10,
        "questions_remaining": 10,
        "can_ask": True,
    }


def test_status_does_not_create_record(client, user_data, memory_store):
    status(client, user_data)
    assert memory_store._records == {}


def test_status_reflects_questions_asked(client, user_data):
    for _ in range(3):
        client.post("/api/chat", json={"message": "career?", "userData": user_data})

    data = status(client, user_data).json()

    assert data["questions_used"] == 3
    assert data["questions_remaining"] == 7
    assert data["can_ask"] is True


def test_status_only_needs_name_and_birth_date(client):
    resp = status(client, {"firstName": "Ravi", "dateOfBirth": "1985-12-01"})
    assert resp.status_code == 200


def test_missing_identity_is_rejected(client):
    resp = status(client, {"firstName": "Ravi"})

    assert resp.status_code == 400
    assert resp.json() == {
        "error": "validation_error",
        "message": "User first name and date of birth are required.",
    }


def test_missing_user_data_is_rejected(client):
    resp = client.post("/api/user-status", json={})
    assert resp.status_code == 400


def _unavailable_tracker(clock, **kwargs) -> QuotaTracker:
    store = AsyncMock()
    store.get.side_effect = StorageUnavailableError()
    return QuotaTracker(store, clock=clock, **kwargs)


def test_storage_outage_returns_503(app_settings, clock, user_data, mock_provider):
    app = create_app(app_settings, tracker=_unavailable_tracker(clock), provider=mock_provider)
    with TestClient(app) as client:
        resp = status(client, user_data)

    assert resp.status_code == 503
    assert resp.json() == {
        "error": "tracking_unavailable",
        "message": "Question tracking is temporarily unavailable.",
    }


def test_storage_outage_fallback_reports_fresh_status(app_settings, clock, user_data, mock_provider):
    tracker = _unavailable_tracker(clock, status_fallback_on_unavailable=True)
    app = create_app(app_settings, tracker=tracker, provider=mock_provider)
    with TestClient(app) as client:
        resp = status(client, user_data)

    assert resp.status_code == 200
    assert resp.json()["can_ask"] is True
