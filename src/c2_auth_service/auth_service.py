"""Service layer for login, account management and password recovery."""

import re
import logging
import uuid
from datetime import timedelta
from pathlib import Path
from typing import Optional, Dict, Any

from src.auth.security import (
    create_user_token,
    generate_reset_token,
    hash_password,
    hash_token,
    verify_password,
)
from src.core.config import get_settings
from src.core.database import get_db, User
from src.core.errors import (
    AuthenticationError,
    NotFoundError,
    PermissionDeniedError,
    UnsupportedMediaTypeError,
)
from src.core.time_utils import to_iso, utcnow

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

INVALID_CREDENTIALS = "Invalid e-mail or password"
SOCIAL_ACCOUNT_LOGIN = "This account uses social login. Sign in with Google or GitHub."
SOCIAL_ACCOUNT_RESET = (
    "This e-mail is linked to a social account (Google/GitHub). Sign in directly there."
)
RESET_REQUESTED = "If the e-mail is registered, you will receive a recovery link."
REGISTRATION_DISABLED = "Public registration is disabled. Contact an administrator to get access."


def user_to_dict(user: User) -> Dict[str, Any]:
    """Profile fields returned by the account endpoints."""
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "avatar": user.avatar,
        "provider": user.provider,
        "role": user.role,
        "can_edit_kanban": bool(user.can_edit_kanban),
        "created_at": to_iso(user.created_at),
    }


def auth_response(user: User) -> Dict[str, Any]:
    """``{user, token}`` payload of every successful login."""
    role = "admin" if get_settings().is_super_admin(user.email) else user.role
    return {
        "user": {"id": user.id, "email": user.email, "name": user.name, "role": role},
        "token": create_user_token(user),
    }


def _check_new_password(password: Optional[str]) -> None:
    min_length = get_settings().auth.min_password_length
    if not password or len(password) < min_length:
        raise ValueError(f"Password must be at least {min_length} characters long")


class AuthService:
    """Password login and self-service account operations."""

    @staticmethod
    def _get_user(db, user_id: int) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    async def login(email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        """
        Authenticate with e-mail and password.

        Raises:
            ValueError: If e-mail or password is missing
            AuthenticationError: Unknown e-mail, OAuth-only account or wrong password
        """
        if not email or not password:
            raise ValueError("E-mail and password are required")

        with get_db() as db:
            user = db.query(User).filter(User.email == email.strip().lower()).first()
            if not user:
                logger.warning(f"Login attempt with unknown e-mail: {email}")
                raise AuthenticationError(INVALID_CREDENTIALS)

            if not user.password_hash:
                logger.warning(f"Password login attempt on OAuth account: {email}")
                raise AuthenticationError(SOCIAL_ACCOUNT_LOGIN)

            if not verify_password(password, user.password_hash):
                logger.warning(f"Login attempt with wrong password: {email}")
                raise AuthenticationError(INVALID_CREDENTIALS)

            logger.info(f"Login succeeded for user {user.id}")
            return auth_response(user)

    @staticmethod
    async def create_user(
        email: Optional[str],
        password: Optional[str],
        name: Optional[str] = None,
        role: Optional[str] = None,
        created_by: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Create an account on behalf of an administrator."""
        if not email or not password:
            raise ValueError("E-mail and password are required")
        _check_new_password(password)

        email = email.strip().lower()
        if not EMAIL_PATTERN.match(email):
            raise ValueError("Invalid e-mail")

        final_role = "admin" if role == "admin" or get_settings().is_super_admin(email) else "user"

        with get_db() as db:
            if db.query(User.id).filter(User.email == email).first():
                logger.warning(f"Admin {created_by} tried to create duplicate user {email}")
                raise ValueError("This e-mail is already registered")

            user = User(
                email=email,
                password_hash=hash_password(password),
                name=name or None,
                role=final_role,
            )
            db.add(user)
            db.flush()

            logger.info(f"User {user.id} ({email}) created by admin {created_by}")
            return {
                "user": {
                    "id": user.id,
                    "email": user.email,
                    "name": user.name,
                    "role": user.role,
                    "created_at": to_iso(user.created_at),
                },
                "message": "User created successfully",
            }

    @staticmethod
    async def register() -> None:
        raise PermissionDeniedError(REGISTRATION_DISABLED)

    @staticmethod
    async def get_me(user_id: int) -> Dict[str, Any]:
        """Profile of the caller with the effective admin and Kanban flags."""
        with get_db() as db:
            user = AuthService._get_user(db, user_id)
            is_admin = user.role == "admin" or get_settings().is_super_admin(user.email)
            data = user_to_dict(user)
            data["is_admin"] = is_admin
            data["can_edit_kanban"] = is_admin or bool(user.can_edit_kanban)
            return data

    @staticmethod
    async def update_profile(user_id: int, name: Optional[str]) -> Dict[str, Any]:
        with get_db() as db:
            user = AuthService._get_user(db, user_id)
            user.name = name.strip() if name else None
            db.flush()
            return user_to_dict(user)

    @staticmethod
    async def update_avatar(user_id: int, avatar: Optional[str]) -> Dict[str, Any]:
        if not avatar:
            raise ValueError("Avatar URL is required")
        with get_db() as db:
            user = AuthService._get_user(db, user_id)
            user.avatar = avatar
            db.flush()
            return user_to_dict(user)

    @staticmethod
    async def set_avatar_file(
        user_id: int, content: bytes, content_type: Optional[str], original_name: Optional[str]
    ) -> Dict[str, Any]:
        """Store an uploaded avatar image under ``uploads/avatars`` and point the profile at it."""
        upload = get_settings().upload
        if not content:
            raise ValueError("No file uploaded")
        if content_type not in upload.allowed_avatar_types:
            raise UnsupportedMediaTypeError("Only image files are allowed (jpeg, png, gif, webp)")
        if len(content) > upload.max_avatar_size:
            raise ValueError(f"File too large. Maximum size is {upload.max_avatar_size // (1024 * 1024)}MB")

        suffix = Path(original_name or "").suffix.lower() or ".img"
        filename = f"avatar-{user_id}-{uuid.uuid4().hex[:12]}{suffix}"
        avatars_dir = Path(upload.uploads_dir) / "avatars"
        avatars_dir.mkdir(parents=True, exist_ok=True)
        path = avatars_dir / filename

        try:
            with get_db() as db:
                user = AuthService._get_user(db, user_id)
                path.write_bytes(content)
                previous = user.avatar
                user.avatar = f"/uploads/avatars/{filename}"
                db.flush()
                data = user_to_dict(user)
        except Exception:
            path.unlink(missing_ok=True)
            raise

        if previous and previous.startswith("/uploads/avatars/"):
            old_file = avatars_dir / Path(previous).name
            if old_file.exists():
                old_file.unlink()

        logger.info(f"User {user_id} uploaded avatar {filename}")
        return data

    @staticmethod
    async def change_password(
        user_id: int, current_password: Optional[str], new_password: Optional[str]
    ) -> Dict[str, str]:
        """Change the password; the current one is required when the account has one."""
        _check_new_password(new_password)

        with get_db() as db:
            user = AuthService._get_user(db, user_id)
            if user.password_hash:
                if not current_password:
                    raise ValueError("Current password is required")
                if not verify_password(current_password, user.password_hash):
                    raise AuthenticationError("Current password is incorrect")

            user.password_hash = hash_password(new_password)

        logger.info(f"User {user_id} changed password")
        return {"message": "Password changed successfully"}

    @staticmethod
    async def forgot_password(email: Optional[str]) -> Dict[str, str]:
        """
        Start password recovery.

        The answer does not reveal whether the e-mail exists, except for
        OAuth-only accounts, which are told to use their provider instead.
        The reset link is written to the log.
        """
        if not email:
            raise ValueError("E-mail is required")

        settings = get_settings()
        with get_db() as db:
            user = db.query(User).filter(User.email == email.strip().lower()).first()
            if not user:
                return {"message": RESET_REQUESTED}

            if not user.password_hash and user.provider:
                return {"message": SOCIAL_ACCOUNT_RESET}

            token = generate_reset_token()
            user.reset_password_token = hash_token(token)
            user.reset_password_expires = utcnow() + timedelta(minutes=settings.auth.reset_token_ttl_minutes)

        reset_link = f"{settings.auth.frontend_url.rstrip('/')}/reset-password?token={token}"
        logger.info(f"Password recovery requested for {email}: {reset_link}")
        return {"message": RESET_REQUESTED}

    @staticmethod
    async def reset_password(token: Optional[str], new_password: Optional[str]) -> Dict[str, str]:
        if not token or not new_password:
            raise ValueError("Token and new password are required")
        _check_new_password(new_password)

        with get_db() as db:
            user = (
                db.query(User)
                .filter(
                    User.reset_password_token == hash_token(token),
                    User.reset_password_expires > utcnow(),
                )
                .first()
            )
            if not user:
                raise ValueError("Invalid or expired token")

            user.password_hash = hash_password(new_password)
            user.reset_password_token = None
            user.reset_password_expires = None
            user_id = user.id

        logger.info(f"Password reset completed for user {user_id}")
        return {"message": "Password changed successfully. Sign in with the new password."}
