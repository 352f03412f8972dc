"""FastAPI dependencies for authentication and role checks."""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request
from pydantic import BaseModel

from src.auth.security import verify_access_token
from src.core.config import get_settings

logger = logging.getLogger(__name__)


class CurrentUser(BaseModel):
    """Identity carried by a verified access token."""

    id: int
    email: str
    name: Optional[str] = None
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin" or get_settings().is_super_admin(self.email)


def _extract_bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(status_code=401, detail="Token not provided")

    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise HTTPException(status_code=401, detail="Malformed token")
    return parts[1]


def _user_from_token(token: str) -> CurrentUser:
    payload = verify_access_token(token)
    if payload is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    try:
        return CurrentUser(
            id=payload["id"],
            email=payload["email"],
            name=payload.get("name"),
            role=payload.get("role", "user"),
        )
    except (KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid or expired token")


async def get_current_user(request: Request) -> CurrentUser:
    """Require a valid bearer token."""
    return _user_from_token(_extract_bearer_token(request))


async def get_admin_user(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Require the admin role (or a super-admin e-mail)."""
    if not current_user.is_admin:
        logger.warning(f"User {current_user.id} denied access to admin route")
        raise HTTPException(status_code=403, detail="Access restricted to administrators")
    return current_user


async def get_kanban_editor(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Require admin or the Kanban edit permission stored on the account."""
    if current_user.is_admin:
        return current_user

    from src.c1_database_session import get_db
    from src.c1_user_models import User

    with get_db() as db:
        user = db.query(User).filter(User.id == current_user.id).first()
        allowed = user is not None and bool(user.can_edit_kanban)

    if not allowed:
        raise HTTPException(status_code=403, detail="You do not have permission to edit the Kanban board")
    return current_user
