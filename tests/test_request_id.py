"""Tests for request ID and security header middleware."""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from astrochat.app.middleware.request_id import RequestIdMiddleware, get_request_id
from astrochat.app.middleware.security_headers import SecurityHeadersMiddleware


class TestRequestIdMiddleware:
    """Test RequestIdMiddleware."""

    @pytest.fixture
    def app(self):
        """Create test app with middleware."""
        app = FastAPI()
        app.add_middleware(RequestIdMiddleware)

        @app.get("/test")
        async def test_endpoint(request: Request):
            return {"request_id": get_request_id(request)}

        return app

    @pytest.fixture
    def client(self, app):
        """Create test client."""
        return TestClient(app)

    def test_request_id_generation(self, client):
        """Test that request ID is generated."""
        response = client.get("/test")

        assert response.status_code == 200
        data = response.json()

        assert data["request_id"] != "unknown"
        assert len(data["request_id"]) == 36

    def test_request_id_from_header(self, client):
        """Test that request ID is extracted from header."""
        custom_id = "my-custom-request-id"
        response = client.get("/test", headers={"X-Request-ID": custom_id})

        assert response.json()["request_id"] == custom_id
        assert response.headers["X-Request-ID"] == custom_id

    def test_request_id_in_response(self, client):
        """Test that request ID is returned in response."""
        response = client.get("/test")

        assert response.headers["X-Request-ID"] == response.json()["request_id"]

    def test_overlong_header_is_replaced(self, client):
        response = client.get("/test", headers={"X-Request-ID": "x" * 500})

        assert response.json()["request_id"] != "x" * 500
        assert len(response.headers["X-Request-ID"]) == 36

    def test_get_request_id_without_middleware(self):
        app = FastAPI()

        @app.get("/test")
        async def test_endpoint(request: Request):
            return {"request_id": get_request_id(request)}

        response = TestClient(app).get("/test")
        assert response.json()["request_id"] == "unknown"


class TestSecurityHeadersMiddleware:

    def _client(self, **kwargs) -> TestClient:
        app = FastAPI()
        app.add_middleware(SecurityHeadersMiddleware, **kwargs)

        @app.get("/test")
        async def test_endpoint():
            return {"ok": True}

        return TestClient(app)

    def test_sets_security_headers(self):
        response = self._client().get("/test")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "no-referrer"
        assert "Strict-Transport-Security" not in response.headers

    def test_hsts_when_enabled(self):
        response = self._client(hsts=True, hsts_max_age=100).get("/test")

        assert response.headers["Strict-Transport-Security"] == "max-age=100; includeSubDomains"
