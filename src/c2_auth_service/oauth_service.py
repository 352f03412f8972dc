"""Social login through Google and GitHub.

Only existing accounts can sign in this way: a provider identity is matched
to a user by e-mail or by a previously linked provider id, and linked to the
account on first use.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import requests
from sqlalchemy import and_, or_

from src.core.config import get_settings
from src.core.database import get_db, User
from src.core.errors import AuthenticationError, ExternalServiceError, PermissionDeniedError
from src.c2_auth_service.auth_service import auth_response

logger = logging.getLogger(__name__)

NOT_REGISTERED = "User not registered. Contact an administrator to get access."


class OAuthService:
    """Exchanges provider credentials for a TicketDesk session."""

    @staticmethod
    def _link_and_respond(
        provider: str, provider_id: str, email: Optional[str], display_name: Optional[str]
    ) -> Dict[str, Any]:
        email = email.strip().lower() if email else None

        with get_db() as db:
            conditions = [and_(User.provider == provider, User.provider_id == provider_id)]
            if email:
                conditions.append(User.email == email)
            user = db.query(User).filter(or_(*conditions)).order_by(User.id.asc()).first()

            if not user:
                logger.warning(f"{provider} login attempt for unregistered e-mail: {email}")
                raise PermissionDeniedError(NOT_REGISTERED)

            if not user.provider:
                user.provider = provider
                user.provider_id = provider_id
                user.name = user.name or display_name
                db.flush()
                logger.info(f"User {user.id} linked to {provider}")

            logger.info(f"{provider} login succeeded for user {user.id}")
            return auth_response(user)

    @staticmethod
    def _get_json(url: str, access_token: str, timeout: float) -> requests.Response:
        try:
            return requests.get(
                url,
                headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
                timeout=timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise ExternalServiceError("Could not reach the authentication provider")

    @staticmethod
    async def google_login(access_token: Optional[str]) -> Dict[str, Any]:
        """Sign in with a Google OAuth access token."""
        if not access_token:
            raise ValueError("Google token is required")

        config = get_settings().oauth
        response = await asyncio.to_thread(
            OAuthService._get_json, config.google_userinfo_url, access_token, config.request_timeout
        )
        if not response.ok:
            logger.warning(f"Google rejected token (status {response.status_code})")
            raise AuthenticationError("Invalid Google token")

        profile = response.json()
        if not profile.get("sub"):
            raise AuthenticationError("Invalid Google token")

        return OAuthService._link_and_respond("google", str(profile["sub"]), profile.get("email"), profile.get("name"))

    @staticmethod
    def _github_primary_email(config, access_token: str, login: str) -> str:
        response = OAuthService._get_json(f"{config.github_api_url}/user/emails", access_token, config.request_timeout)
        emails = response.json() if response.ok else []
        primary = next((e for e in emails if isinstance(e, dict) and e.get("primary")), None)
        if primary and primary.get("email"):
            return primary["email"]
        return f"{login}@github.local"

    @staticmethod
    def _github_identity(config, code: str) -> Dict[str, Any]:
        """Exchange ``code`` for a token and fetch the GitHub profile with it."""
        try:
            token_response = requests.post(
                config.github_token_url,
                json={
                    "client_id": config.github_client_id,
                    "client_secret": config.github_client_secret.get_secret_value(),
                    "code": code,
                },
                headers={"Accept": "application/json"},
                timeout=config.request_timeout,
            )
        except requests.RequestException as e:
            logger.error(f"GitHub token exchange failed: {e}")
            raise ExternalServiceError("Could not reach the authentication provider")

        try:
            token_data = token_response.json()
        except ValueError:
            token_data = {}
        access_token = token_data.get("access_token")
        if token_data.get("error") or not access_token:
            logger.warning(f"GitHub rejected code: {token_data.get('error')}")
            raise AuthenticationError("Invalid GitHub code")

        user_response = OAuthService._get_json(f"{config.github_api_url}/user", access_token, config.request_timeout)
        if not user_response.ok:
            raise AuthenticationError("Invalid GitHub code")
        github_user = user_response.json()

        login = github_user.get("login") or str(github_user.get("id"))
        email = github_user.get("email") or OAuthService._github_primary_email(config, access_token, login)

        return {"id": str(github_user.get("id")), "email": email, "name": github_user.get("name") or login}

    @staticmethod
    async def github_login(code: Optional[str]) -> Dict[str, Any]:
        """Sign in with a GitHub OAuth authorization code."""
        if not code:
            raise ValueError("GitHub code is required")

        config = get_settings().oauth
        if not config.github_client_id or not config.github_client_secret:
            raise ExternalServiceError("GitHub OAuth is not configured", status_code=500)

        identity = await asyncio.to_thread(OAuthService._github_identity, config, code)
        return OAuthService._link_and_respond("github", identity["id"], identity["email"], identity["name"])
