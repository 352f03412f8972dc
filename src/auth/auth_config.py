"""Authentication configuration accessors."""

from src.core.config import AuthConfig, get_settings


def get_auth_config() -> AuthConfig:
    """Return the auth section of the current settings."""
    return get_settings().auth
