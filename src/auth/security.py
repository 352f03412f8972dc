"""Password hashing and JWT token utilities."""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from src.auth.auth_config import get_auth_config
from src.core.config import get_settings

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of the secret
_BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a password with bcrypt using the configured cost factor."""
    rounds = get_auth_config().bcrypt_rounds
    hashed = bcrypt.hashpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            password.encode("utf-8")[:_BCRYPT_MAX_BYTES], password_hash.encode("utf-8")
        )
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed access token carrying ``data`` as claims."""
    config = get_auth_config()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=config.jwt_expire_days))

    to_encode = dict(data)
    to_encode.update({"exp": expire, "iat": now, "type": "access"})
    return jwt.encode(to_encode, config.jwt_secret.get_secret_value(), algorithm=config.jwt_algorithm)


def create_user_token(user) -> str:
    """Issue an access token for a user.

    Super-admin e-mails always get the admin role in the token, whatever is
    stored on the account.
    """
    role = "admin" if get_settings().is_super_admin(user.email) else user.role
    return create_access_token(
        {
            "sub": str(user.id),
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "role": role,
        }
    )


def verify_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode an access token; returns None when it is invalid or expired."""
    config = get_auth_config()
    try:
        payload = jwt.decode(
            token, config.jwt_secret.get_secret_value(), algorithms=[config.jwt_algorithm]
        )
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        return None

    if payload.get("type") != "access":
        return None
    return payload


def generate_reset_token() -> str:
    """Random password-reset token (20 bytes, hex encoded)."""
    return secrets.token_hex(20)


def hash_token(token: str) -> str:
    """Hash a token for storage."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
