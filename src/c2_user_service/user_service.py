"""Service layer for user administration."""

import logging
from typing import List, Dict, Any

from sqlalchemy import func

from src.core.config import get_settings
from src.core.database import get_db, User, Document
from src.core.errors import NotFoundError, PermissionDeniedError
from src.core.time_utils import to_iso
from src.c1_ticket_enums import UserRole

logger = logging.getLogger(__name__)


class UserService:
    """Admin operations on user accounts."""

    @staticmethod
    async def list_users() -> List[Dict[str, Any]]:
        """All users, newest first, with their document count."""
        with get_db() as db:
            document_counts = (
                db.query(Document.user_id, func.count(Document.id).label("documents"))
                .group_by(Document.user_id)
                .subquery()
            )
            rows = (
                db.query(User, func.coalesce(document_counts.c.documents, 0))
                .outerjoin(document_counts, document_counts.c.user_id == User.id)
                .order_by(User.created_at.desc(), User.id.desc())
                .all()
            )
            return [
                {
                    "id": user.id,
                    "email": user.email,
                    "name": user.name,
                    "avatar": user.avatar,
                    "role": user.role,
                    "can_edit_kanban": bool(user.can_edit_kanban),
                    "provider": user.provider,
                    "created_at": to_iso(user.created_at),
                    "document_count": documents,
                }
                for user, documents in rows
            ]

    @staticmethod
    async def update_role(user_id: int, role: str, admin_id: int) -> Dict[str, Any]:
        """
        Change a user's role.

        Raises:
            ValueError: If the role is not ``user`` or ``admin``
            PermissionDeniedError: Self-demotion or a super-admin target
            NotFoundError: If the user does not exist
        """
        if role not in [r.value for r in UserRole]:
            raise ValueError("Invalid role. Use 'user' or 'admin'.")
        if user_id == admin_id and role != UserRole.ADMIN.value:
            raise PermissionDeniedError("You cannot remove your own administrator privilege.")

        with get_db() as db:
            user = db.query(User).filter(User.id == user_id).first()
            if not user:
                raise NotFoundError("User not found")
            if get_settings().is_super_admin(user.email):
                raise PermissionDeniedError("The role of a super admin cannot be changed.")

            user.role = role
            logger.info(f"Admin {admin_id} set role of user {user_id} to {role}")
            return {"id": user.id, "email": user.email, "role": user.role}

    @staticmethod
    async def update_kanban_permission(user_id: int, can_edit_kanban: bool) -> Dict[str, Any]:
        with get_db() as db:
            user = db.query(User).filter(User.id == user_id).first()
            if not user:
                raise NotFoundError("User not found")
            if user.role == UserRole.ADMIN.value or get_settings().is_super_admin(user.email):
                raise ValueError("Administrators already have full Kanban access.")

            user.can_edit_kanban = bool(can_edit_kanban)
            logger.info(f"Kanban permission of user {user_id} set to {user.can_edit_kanban}")
            return {"id": user.id, "email": user.email, "can_edit_kanban": user.can_edit_kanban}

    @staticmethod
    async def delete_user(user_id: int, admin_id: int) -> Dict[str, str]:
        if user_id == admin_id:
            raise PermissionDeniedError("You cannot delete your own account here.")

        with get_db() as db:
            user = db.query(User).filter(User.id == user_id).first()
            if not user:
                raise NotFoundError("User not found")
            if get_settings().is_super_admin(user.email):
                raise PermissionDeniedError("A super administrator cannot be deleted.")
            db.delete(user)

        logger.info(f"User {user_id} deleted by admin {admin_id}")
        return {"message": "User deleted successfully"}
