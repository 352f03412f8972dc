"""Service layer for knowledge-base manuals."""

import logging
from typing import List, Dict, Any

from sqlalchemy import or_

from src.core.database import get_db, Manual
from src.core.errors import NotFoundError, PermissionDeniedError
from src.core.time_utils import to_iso

logger = logging.getLogger(__name__)


def manual_to_dict(manual: Manual) -> Dict[str, Any]:
    return {
        "id": manual.id,
        "user_id": manual.user_id,
        "title": manual.title,
        "content": manual.content,
        "is_global": manual.is_global,
        "created_at": to_iso(manual.created_at),
        "updated_at": to_iso(manual.updated_at),
    }


class ManualService:

    @staticmethod
    async def list_manuals(user_id: int) -> List[Dict[str, Any]]:
        """The user's own manuals plus every global one; global first, then newest."""
        with get_db() as db:
            manuals = (
                db.query(Manual)
                .filter(or_(Manual.user_id == user_id, Manual.is_global.is_(True)))
                .order_by(Manual.is_global.desc(), Manual.created_at.desc())
                .all()
            )
            return [manual_to_dict(m) for m in manuals]

    @staticmethod
    async def create_manual(
        user_id: int, is_admin: bool, title: str, content: str, is_global: bool = False
    ) -> Dict[str, Any]:
        """Create a manual. Only administrators can publish a global manual."""
        if not title or not title.strip():
            raise ValueError("Title is required")
        if content is None:
            raise ValueError("Content is required")

        if is_global and not is_admin:
            logger.info(f"User {user_id} asked for a global manual without admin role; creating a private one")

        with get_db() as db:
            manual = Manual(
                user_id=user_id,
                title=title.strip(),
                content=content,
                is_global=bool(is_global and is_admin),
            )
            db.add(manual)
            db.flush()
            return manual_to_dict(manual)

    @staticmethod
    async def delete_manual(manual_id: str, user_id: int, is_admin: bool) -> None:
        with get_db() as db:
            manual = db.query(Manual).filter(Manual.id == manual_id).first()
            if not manual:
                raise NotFoundError("Manual not found")
            if manual.user_id != user_id and not is_admin:
                raise PermissionDeniedError("You do not have permission to delete this manual")
            db.delete(manual)
        logger.info(f"Manual {manual_id} deleted by user {user_id}")
