"""Tests for Google and GitHub sign-in with the providers mocked."""

import threading
from unittest.mock import MagicMock, patch

import pytest
import requests

from src.c2_auth_service import OAuthService
from src.core.config import reload_settings
from src.core.errors import AuthenticationError, ExternalServiceError, PermissionDeniedError


def _response(payload, ok=True, status_code=200):
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    response.json.return_value = payload
    return response


@pytest.fixture
def github_configured(monkeypatch):
    monkeypatch.setenv("GITHUB_CLIENT_ID", "client-id")
    monkeypatch.setenv("GITHUB_CLIENT_SECRET", "client-secret")
    return reload_settings()


class TestGoogleLogin:

    @pytest.mark.asyncio
    async def test_links_existing_account(self, make_user):
        user = make_user("ana@example.com", oauth_only=True)
        profile = {"sub": "google-123", "email": "Ana@Example.com", "name": "Ana"}

        with patch("src.c2_auth_service.oauth_service.requests.get", return_value=_response(profile)) as mock_get:
            result = await OAuthService.google_login("access-token")

        assert result["user"]["id"] == user.id
        assert result["token"]
        assert mock_get.call_args.kwargs["headers"]["Authorization"] == "Bearer access-token"

    @pytest.mark.asyncio
    async def test_provider_call_runs_off_the_event_loop(self, make_user):
        make_user("ana@example.com", oauth_only=True)
        threads = []

        def fake_get(url, **kwargs):
            threads.append(threading.current_thread())
            return _response({"sub": "google-123", "email": "ana@example.com"})

        with patch("src.c2_auth_service.oauth_service.requests.get", side_effect=fake_get):
            await OAuthService.google_login("access-token")

        assert threads and threads[0] is not threading.main_thread()

    @pytest.mark.asyncio
    async def test_unregistered_email_is_refused(self):
        profile = {"sub": "google-999", "email": "stranger@example.com"}

        with patch("src.c2_auth_service.oauth_service.requests.get", return_value=_response(profile)):
            with pytest.raises(PermissionDeniedError, match="not registered"):
                await OAuthService.google_login("access-token")

    @pytest.mark.asyncio
    async def test_rejected_token(self):
        with patch(
            "src.c2_auth_service.oauth_service.requests.get",
            return_value=_response({"error": "invalid_token"}, ok=False, status_code=401),
        ):
            with pytest.raises(AuthenticationError):
                await OAuthService.google_login("bad-token")

    @pytest.mark.asyncio
    async def test_missing_token(self):
        with pytest.raises(ValueError):
            await OAuthService.google_login(None)

    @pytest.mark.asyncio
    async def test_provider_unreachable(self):
        with patch(
            "src.c2_auth_service.oauth_service.requests.get",
            side_effect=requests.ConnectionError("down"),
        ):
            with pytest.raises(ExternalServiceError):
                await OAuthService.google_login("access-token")

    def test_google_endpoint(self, client, make_user):
        make_user("ana@example.com", oauth_only=True)
        profile = {"sub": "google-123", "email": "ana@example.com"}

        with patch("src.c2_auth_service.oauth_service.requests.get", return_value=_response(profile)):
            response = client.post("/api/auth/oauth/google", json={"access_token": "t"})

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "ana@example.com"


class TestGitHubLogin:

    @pytest.mark.asyncio
    async def test_not_configured(self):
        with pytest.raises(ExternalServiceError) as exc_info:
            await OAuthService.github_login("code")

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_uses_primary_email_when_profile_hides_it(self, github_configured, make_user):
        user = make_user("dev@example.com", oauth_only=True)

        def fake_get(url, **kwargs):
            if url.endswith("/user/emails"):
                return _response([
                    {"email": "old@example.com", "primary": False},
                    {"email": "dev@example.com", "primary": True},
                ])
            return _response({"id": 42, "login": "dev", "email": None})

        with patch("src.c2_auth_service.oauth_service.requests.post", return_value=_response({"access_token": "gh"})), \
                patch("src.c2_auth_service.oauth_service.requests.get", side_effect=fake_get):
            result = await OAuthService.github_login("code")

        assert result["user"]["id"] == user.id

    @pytest.mark.asyncio
    async def test_linked_provider_id_matches_after_email_change(self, github_configured, make_user):
        user = make_user("dev@example.com", oauth_only=True)
        post = _response({"access_token": "gh"})

        with patch("src.c2_auth_service.oauth_service.requests.post", return_value=post), \
                patch(
                    "src.c2_auth_service.oauth_service.requests.get",
                    return_value=_response({"id": 42, "login": "dev", "email": "dev@example.com"}),
                ):
            await OAuthService.github_login("first")

        with patch("src.c2_auth_service.oauth_service.requests.post", return_value=post), \
                patch(
                    "src.c2_auth_service.oauth_service.requests.get",
                    return_value=_response({"id": 42, "login": "dev", "email": "new@example.com"}),
                ):
            result = await OAuthService.github_login("second")

        assert result["user"]["id"] == user.id

    @pytest.mark.asyncio
    async def test_rejected_code(self, github_configured):
        with patch(
            "src.c2_auth_service.oauth_service.requests.post",
            return_value=_response({"error": "bad_verification_code"}),
        ):
            with pytest.raises(AuthenticationError, match="Invalid GitHub code"):
                await OAuthService.github_login("expired")
