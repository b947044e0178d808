"""Tests for rate limiting middleware."""

import hashlib
from unittest.mock import Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from astrochat.app.middleware.rate_limit import (
    InMemoryRateLimiter,
    RateLimitMiddleware,
    RateLimitResult,
    RateLimitRule,
    get_client_ip,
)


class TestInMemoryRateLimiter:
    """Tests for in-memory rate limiter."""

    @pytest.fixture
    def limiter(self):
        return InMemoryRateLimiter(max_requests=10, window_seconds=60)

    @pytest.mark.asyncio
    async def test_sliding_window_allows_requests_under_limit(self, limiter):
        """Test that requests under limit are allowed."""
        result = await limiter.is_allowed("test_key")
        assert result.allowed is True
        assert result.remaining == 9
        assert result.limit == 10

    @pytest.mark.asyncio
    async def test_sliding_window_blocks_over_limit(self, limiter):
        """Test that requests over limit are blocked."""
        for _ in range(10):
            result = await limiter.is_allowed("test_key")
        assert result.allowed is True
        assert result.remaining == 0

        result = await limiter.is_allowed("test_key")
        assert result.allowed is False
        assert result.remaining == 0
        assert result.retry_after >= 1

    @pytest.mark.asyncio
    async def test_different_keys_independent(self, limiter):
        """Test that different keys have independent limits."""
        for _ in range(10):
            await limiter.is_allowed("key1")

        result = await limiter.is_allowed("key1")
        assert result.allowed is False

        result = await limiter.is_allowed("key2")
        assert result.allowed is True

    @pytest.mark.asyncio
    async def test_expired_window_resets(self, limiter):
        for _ in range(10):
            await limiter.is_allowed("test_key")
        limiter._storage["test_key"].window_start -= 61

        result = await limiter.is_allowed("test_key")
        assert result.allowed is True
        assert result.remaining == 9

    @pytest.mark.asyncio
    async def test_lru_bound(self):
        limiter = InMemoryRateLimiter(max_requests=5, window_seconds=60, max_entries=10)
        for i in range(30):
            await limiter.is_allowed(f"key{i}")
        assert len(limiter._storage) <= 11


class TestRateLimitResult:
    """Tests for RateLimitResult dataclass."""

    def test_result_creation(self):
        result = RateLimitResult(
            allowed=True,
            limit=100,
            remaining=99,
            reset_time=1234567890,
            retry_after=None
        )
        assert result.allowed is True
        assert result.limit == 100
        assert result.remaining == 99


class TestClientKey:

    def test_client_ip_from_peer(self):
        request = Mock()
        request.headers = {}
        request.client.host = "192.168.1.1"
        assert get_client_ip(request) == "192.168.1.1"

    def test_client_ip_from_x_forwarded_for(self):
        request = Mock()
        request.headers = {"X-Forwarded-For": "10.0.0.1, 192.168.1.1"}
        request.client.host = "127.0.0.1"
        assert get_client_ip(request) == "10.0.0.1"

    def test_client_key_is_hashed(self):
        """IP is hashed for privacy."""
        request = Mock()
        request.headers = {}
        request.client.host = "192.168.1.1"
        rule = RateLimitRule(path_prefix="/api/chat", max_requests=1, window_seconds=60)

        key = RateLimitMiddleware._get_client_key(request, rule)

        expected_hash = hashlib.sha256("192.168.1.1".encode()).hexdigest()[:32]
        assert key == f"ratelimit:/api/chat:{expected_hash}"
        assert "192.168.1.1" not in key


class TestRateLimitMiddleware:
    """Tests for rate limit middleware."""

    @pytest.fixture
    def client(self):
        app = FastAPI()
        app.add_middleware(
            RateLimitMiddleware,
            rules=[
                RateLimitRule(path_prefix="/api/chat", max_requests=2, window_seconds=900, message="Slow down"),
                RateLimitRule(path_prefix="/api/user-status", max_requests=1, window_seconds=60),
            ],
        )

        @app.post("/api/chat")
        async def chat():
            return {"ok": True}

        @app.post("/api/user-status")
        async def status():
            return {"ok": True}

        @app.get("/api/health")
        async def health():
            return {"ok": True}

        return TestClient(app)

    def test_adds_rate_limit_headers(self, client):
        resp = client.post("/api/chat")
        assert resp.status_code == 200
        assert resp.headers["X-RateLimit-Limit"] == "2"
        assert resp.headers["X-RateLimit-Remaining"] == "1"
        assert "X-RateLimit-Reset" in resp.headers

    def test_returns_429_when_exhausted(self, client):
        client.post("/api/chat")
        client.post("/api/chat")

        resp = client.post("/api/chat")

        assert resp.status_code == 429
        assert resp.json()["error"] == "rate_limit_exceeded"
        assert resp.json()["message"] == "Slow down"
        assert int(resp.headers["Retry-After"]) >= 1
        assert resp.headers["X-RateLimit-Remaining"] == "0"

    def test_rules_have_separate_budgets(self, client):
        assert client.post("/api/user-status").status_code == 200
        assert client.post("/api/user-status").status_code == 429
        assert client.post("/api/chat").status_code == 200

    def test_unmatched_paths_are_not_limited(self, client):
        for _ in range(5):
            resp = client.get("/api/health")
            assert resp.status_code == 200
            assert "X-RateLimit-Limit" not in resp.headers

    def test_clients_are_limited_separately(self, client):
        client.post("/api/user-status", headers={"X-Forwarded-For": "10.0.0.1"})
        resp = client.post("/api/user-status", headers={"X-Forwarded-For": "10.0.0.2"})
        assert resp.status_code == 200
