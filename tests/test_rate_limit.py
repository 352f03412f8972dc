"""Tests for the per-IP rate limits."""

import time

import pytest

from src.auth.rate_limit import RateLimiter
from src.core.config import reload_settings


class TestRateLimiter:

    def test_window(self):
        limiter = RateLimiter("test", lambda c: (2, 60), "slow down")

        assert limiter.hit("10.0.0.1", 2, 60) == 0
        assert limiter.hit("10.0.0.1", 2, 60) == 0
        assert limiter.hit("10.0.0.1", 2, 60) > 0
        assert limiter.hit("10.0.0.2", 2, 60) == 0

    def test_reset(self):
        limiter = RateLimiter("test", lambda c: (1, 60), "slow down")
        limiter.hit("10.0.0.1", 1, 60)

        limiter.reset()

        assert limiter.hit("10.0.0.1", 1, 60) == 0

    def test_expired_keys_are_dropped(self, monkeypatch):
        clock = [1000.0]
        monkeypatch.setattr(time, "monotonic", lambda: clock[0])
        limiter = RateLimiter("test", lambda c: (5, 60), "slow down")
        limiter.hit("10.0.0.1", 5, 60)
        limiter.hit("10.0.0.2", 5, 60)
        assert limiter.tracked_keys() == 2

        clock[0] += 61
        limiter.hit("10.0.0.3", 5, 60)

        assert limiter.tracked_keys() == 1


class TestRateLimitedRoutes:

    @pytest.fixture
    def limited(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_ENABLED", "true")
        monkeypatch.setenv("RATE_LIMIT_LOGIN_REQUESTS", "2")
        return reload_settings()

    def test_login_limit(self, limited, client):
        payload = {"email": "nobody@example.com", "password": "wrong-password"}

        statuses = [client.post("/api/auth/login", json=payload).status_code for _ in range(3)]

        assert statuses == [401, 401, 429]

    def test_forwarded_header_does_not_reset_count(self, limited, client):
        payload = {"email": "nobody@example.com", "password": "wrong-password"}

        statuses = [
            client.post("/api/auth/login", json=payload, headers={"X-Forwarded-For": f"10.0.0.{i}"}).status_code
            for i in range(4)
        ]

        assert statuses == [401, 401, 429, 429]

    def test_forwarded_header_used_behind_trusted_proxy(self, limited, client, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_TRUST_FORWARDED_FOR", "true")
        reload_settings()
        payload = {"email": "nobody@example.com", "password": "wrong-password"}

        statuses = [
            client.post("/api/auth/login", json=payload, headers={"X-Forwarded-For": f"10.0.0.{i}"}).status_code
            for i in range(4)
        ]

        assert statuses == [401] * 4

    def test_limit_response(self, limited, client):
        payload = {"email": "nobody@example.com", "password": "wrong-password"}
        for _ in range(2):
            client.post("/api/auth/login", json=payload)

        response = client.post("/api/auth/login", json=payload)

        assert response.json() == {"error": "Too many login attempts. Please try again in 15 minutes."}
        assert int(response.headers["Retry-After"]) > 0

    def test_disabled_by_default_in_tests(self, client):
        payload = {"email": "nobody@example.com", "password": "wrong-password"}

        statuses = {client.post("/api/auth/login", json=payload).status_code for _ in range(15)}

        assert statuses == {401}
