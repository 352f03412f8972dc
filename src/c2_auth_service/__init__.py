"""C2 Auth Service - Login, social login and account management."""
from src.c2_auth_service.auth_service import AuthService
from src.c2_auth_service.oauth_service import OAuthService
__all__ = ["AuthService", "OAuthService"]
