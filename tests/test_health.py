from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from astrochat.app.main import create_app


def test_health_without_database(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["service"] == "AstroChat Backend"
    assert "timestamp" in data
    assert data["environment"] == {
        "has_gemini_key": False,
        "has_database_url": True,
        "environment": "development",
    }
    assert data["components"]["database"]["status"] == "not_configured"


def test_health_with_sqlite(app_settings, mock_provider):
    app = create_app(app_settings, provider=mock_provider)
    with TestClient(app) as client:
        data = client.get("/api/health").json()

    assert data["status"] == "ok"
    assert data["components"]["database"] == {"status": "ok", "dialect": "sqlite"}


def test_health_reports_degraded_database(app_settings, tracker, mock_provider):
    app = create_app(app_settings, tracker=tracker, provider=mock_provider)
    with TestClient(app) as client:
        database = AsyncMock()
        database.ping.side_effect = ConnectionRefusedError(
            "password authentication failed for user astrochat at 10.0.0.5:5432"
        )
        app.state.database = database
        resp = client.get("/api/health")

    data = resp.json()
    assert data["status"] == "degraded"
    assert data["components"]["database"] == {"status": "error"}
    assert "password" not in resp.text
    assert "10.0.0.5" not in resp.text


def test_root_lists_endpoints(client):
    data = client.get("/").json()

    assert data["message"] == "AstroChat Backend API"
    assert data["endpoints"]["chat"] == "POST /api/chat"
    assert data["endpoints"]["user_status"] == "POST /api/user-status"


def test_unknown_route_returns_cosmic_404(client):
    resp = client.get("/api/horoscope")

    assert resp.status_code == 404
    assert resp.json() == {"error": "Endpoint not found in this cosmic realm"}


def test_wrong_method_is_not_masked_as_404(client):
    resp = client.get("/api/chat")
    assert resp.status_code == 405
