"""Service layer for ticket comments and followers."""

import re
import logging
from typing import List, Dict, Any, Iterable

from sqlalchemy.orm import Session, joinedload

from src.core.database import get_db, Ticket, TicketComment, TicketFollower, User
from src.core.errors import NotFoundError
from src.core.time_utils import to_iso
from src.c1_ticket_enums import ActivityType
from src.c2_ticket_service.activity_service import TicketActivityService

logger = logging.getLogger(__name__)

# "@user@example.com" mentions inside a comment
MENTION_PATTERN = re.compile(r"@[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")

ACTIVITY_PREVIEW_LENGTH = 280


def extract_mentions(content: str) -> List[str]:
    """E-mail addresses mentioned in ``content``, in order, without duplicates."""
    seen = []
    for match in MENTION_PATTERN.findall(content or ""):
        email = match[1:]
        if email not in seen:
            seen.append(email)
    return seen


def comment_to_dict(comment: TicketComment) -> Dict[str, Any]:
    return {
        "id": comment.id,
        "ticket_id": comment.ticket_id,
        "content": comment.content,
        "created_at": to_iso(comment.created_at),
        "user": comment.user.to_summary(include_avatar=False) if comment.user else None,
    }


class TicketCommentService:
    """Comments, auto-follow and follower management."""

    @staticmethod
    def _ensure_ticket(db: Session, ticket_id: int) -> None:
        if not db.query(Ticket.id).filter(Ticket.id == ticket_id).first():
            raise NotFoundError("Ticket not found")

    @staticmethod
    def _follow(db: Session, ticket_id: int, user_ids: Iterable[int]) -> List[int]:
        """Insert follower rows that do not exist yet; returns the new follower ids."""
        user_ids = list(dict.fromkeys(user_ids))
        if not user_ids:
            return []
        existing = {
            row.user_id
            for row in db.query(TicketFollower.user_id)
            .filter(TicketFollower.ticket_id == ticket_id, TicketFollower.user_id.in_(user_ids))
            .all()
        }
        added = [uid for uid in user_ids if uid not in existing]
        for uid in added:
            db.add(TicketFollower(ticket_id=ticket_id, user_id=uid))
        return added

    @staticmethod
    async def list_comments(ticket_id: int) -> List[Dict[str, Any]]:
        """Comments of a ticket, oldest first."""
        with get_db() as db:
            TicketCommentService._ensure_ticket(db, ticket_id)
            comments = (
                db.query(TicketComment)
                .options(joinedload(TicketComment.user))
                .filter(TicketComment.ticket_id == ticket_id)
                .order_by(TicketComment.created_at.asc(), TicketComment.id.asc())
                .all()
            )
            return [comment_to_dict(c) for c in comments]

    @staticmethod
    async def add_comment(ticket_id: int, user_id: int, content: str) -> Dict[str, Any]:
        """
        Add a comment, log it and auto-follow the author and mentioned users.

        Everything is written in one transaction.

        Raises:
            ValueError: If the content is blank
            NotFoundError: If the ticket does not exist
        """
        if not content or not content.strip():
            raise ValueError("Comment content is required")

        with get_db() as db:
            TicketCommentService._ensure_ticket(db, ticket_id)

            comment = TicketComment(ticket_id=ticket_id, user_id=user_id, content=content)
            db.add(comment)

            TicketActivityService.record(
                db, ticket_id, user_id, ActivityType.COMMENT, content[:ACTIVITY_PREVIEW_LENGTH]
            )

            followers = [user_id]
            mentions = extract_mentions(content)
            if mentions:
                mentioned = db.query(User.id).filter(User.email.in_(mentions)).all()
                followers.extend(row.id for row in mentioned)
            added = TicketCommentService._follow(db, ticket_id, followers)

            db.flush()
            db.refresh(comment)
            logger.info(
                f"User {user_id} commented on ticket {ticket_id} "
                f"({len(mentions)} mentions, {len(added)} new followers)"
            )
            return comment_to_dict(comment)

    @staticmethod
    async def toggle_follow(ticket_id: int, user_id: int) -> Dict[str, bool]:
        with get_db() as db:
            TicketCommentService._ensure_ticket(db, ticket_id)
            existing = (
                db.query(TicketFollower)
                .filter(TicketFollower.ticket_id == ticket_id, TicketFollower.user_id == user_id)
                .first()
            )
            if existing:
                db.delete(existing)
                return {"following": False}

            db.add(TicketFollower(ticket_id=ticket_id, user_id=user_id))
            return {"following": True}

    @staticmethod
    async def list_followers(ticket_id: int) -> List[Dict[str, Any]]:
        """Followers with the date they started following, oldest first."""
        with get_db() as db:
            TicketCommentService._ensure_ticket(db, ticket_id)
            followers = (
                db.query(TicketFollower)
                .options(joinedload(TicketFollower.user))
                .filter(TicketFollower.ticket_id == ticket_id)
                .order_by(TicketFollower.created_at.asc(), TicketFollower.id.asc())
                .all()
            )
            return [
                {**f.user.to_summary(include_avatar=False), "created_at": to_iso(f.created_at)}
                for f in followers
            ]
