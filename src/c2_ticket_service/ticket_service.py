"""Service layer for managing tickets and their Kanban placement."""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from src.core.database import get_db, Ticket, User
from src.core.errors import NotFoundError
from src.core.time_utils import to_iso
from src.c1_ticket_enums import (
    ActivityType,
    KanbanStage,
    TicketPriority,
    TicketStatus,
    TicketType,
)
from src.c2_ticket_service.activity_service import TicketActivityService

logger = logging.getLogger(__name__)

# Fields a client may set on create/update
EDITABLE_FIELDS = (
    "title",
    "description",
    "status",
    "priority",
    "type",
    "stage",
    "url",
    "ticket_number",
    "registration_date",
    "assignee_id",
)


def ticket_to_dict(ticket: Ticket) -> Dict[str, Any]:
    """Serialize a ticket with creator/assignee summaries."""
    return {
        "id": ticket.id,
        "ticket_number": ticket.ticket_number,
        "title": ticket.title,
        "description": ticket.description,
        "status": ticket.status,
        "priority": ticket.priority,
        "type": ticket.type,
        "stage": ticket.stage,
        "position": ticket.position,
        "url": ticket.url,
        "registration_date": to_iso(ticket.registration_date),
        "creator_id": ticket.creator_id,
        "assignee_id": ticket.assignee_id,
        "creator": ticket.creator.to_summary() if ticket.creator else None,
        "assignee": ticket.assignee.to_summary() if ticket.assignee else None,
        "created_at": to_iso(ticket.created_at),
        "updated_at": to_iso(ticket.updated_at),
    }


def _check_choice(value: Optional[str], enum_cls, field: str) -> None:
    if value is None:
        return
    allowed = [member.value for member in enum_cls]
    if value not in allowed:
        raise ValueError(f"Invalid {field}: {value}. Allowed: {', '.join(allowed)}")


def _normalize_datetime(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class TicketService:
    """Service for ticket CRUD and Kanban operations."""

    @staticmethod
    def _next_position(db: Session, stage: str) -> int:
        """Position that appends a card at the end of ``stage``."""
        max_position = db.query(func.max(Ticket.position)).filter(Ticket.stage == stage).scalar()
        return (max_position or 0) + 1

    @staticmethod
    def _validate_fields(data: Dict[str, Any]) -> None:
        _check_choice(data.get("status"), TicketStatus, "status")
        _check_choice(data.get("priority"), TicketPriority, "priority")
        _check_choice(data.get("type"), TicketType, "type")
        _check_choice(data.get("stage"), KanbanStage, "stage")

    @staticmethod
    def _check_assignee(db: Session, assignee_id: Optional[int]) -> None:
        if assignee_id is not None and not db.query(User.id).filter(User.id == assignee_id).first():
            raise ValueError(f"Assignee not found: {assignee_id}")

    @staticmethod
    def _load(db: Session, ticket_id: int) -> Ticket:
        ticket = (
            db.query(Ticket)
            .options(joinedload(Ticket.creator), joinedload(Ticket.assignee))
            .filter(Ticket.id == ticket_id)
            .first()
        )
        if not ticket:
            raise NotFoundError("Ticket not found")
        return ticket

    @staticmethod
    async def list_tickets() -> List[Dict[str, Any]]:
        """All tickets in board order: stage, position, newest first."""
        with get_db() as db:
            tickets = (
                db.query(Ticket)
                .options(joinedload(Ticket.creator), joinedload(Ticket.assignee))
                .order_by(Ticket.stage.asc(), Ticket.position.asc(), Ticket.created_at.desc())
                .all()
            )
            return [ticket_to_dict(t) for t in tickets]

    @staticmethod
    async def get_ticket(ticket_id: int) -> Dict[str, Any]:
        with get_db() as db:
            return ticket_to_dict(TicketService._load(db, ticket_id))

    @staticmethod
    async def create_ticket(data: Dict[str, Any], user_id: Optional[int]) -> Dict[str, Any]:
        """
        Create a ticket and append it to its Kanban stage.

        Args:
            data: Ticket fields (title is required)
            user_id: ID of the creating user

        Returns:
            Dictionary with the created ticket

        Raises:
            ValueError: If validation fails
        """
        title = (data.get("title") or "").strip()
        if not title:
            raise ValueError("Title is required")

        TicketService._validate_fields(data)
        stage = data.get("stage") or KanbanStage.BACKLOG.value

        with get_db() as db:
            TicketService._check_assignee(db, data.get("assignee_id"))

            ticket = Ticket(
                title=title,
                description=data.get("description"),
                status=data.get("status") or TicketStatus.ABERTO.value,
                priority=data.get("priority") or TicketPriority.MEDIA.value,
                type=data.get("type") or TicketType.OUTROS.value,
                url=data.get("url"),
                ticket_number=data.get("ticket_number"),
                registration_date=_normalize_datetime(data.get("registration_date")),
                stage=stage,
                position=TicketService._next_position(db, stage),
                creator_id=user_id,
                assignee_id=data.get("assignee_id"),
            )
            db.add(ticket)
            db.flush()

            TicketActivityService.record(
                db, ticket.id, user_id, ActivityType.CREATE, f"Ticket created in {stage}", to_stage=stage
            )
            db.flush()
            db.refresh(ticket)

            logger.info(f"Created ticket {ticket.id} ('{title[:60]}') in {stage} at position {ticket.position}")
            return ticket_to_dict(ticket)

    @staticmethod
    async def update_ticket(
        ticket_id: int, updates: Dict[str, Any], user_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Apply a partial update. Only keys present in ``updates`` are touched;
        ``assignee_id=None`` clears the assignee.
        """
        TicketService._validate_fields(updates)
        if "title" in updates and not (updates["title"] or "").strip():
            raise ValueError("Title cannot be empty")

        with get_db() as db:
            ticket = TicketService._load(db, ticket_id)
            if "assignee_id" in updates:
                TicketService._check_assignee(db, updates["assignee_id"])

            changed = []
            for field in EDITABLE_FIELDS:
                if field not in updates:
                    continue
                value = updates[field]
                if field == "registration_date":
                    value = _normalize_datetime(value)
                elif field == "title":
                    value = value.strip()
                elif field in ("status", "priority", "type", "stage") and value is None:
                    continue
                if getattr(ticket, field) != value:
                    changed.append(field)
                    if field == "stage":
                        ticket.position = TicketService._next_position(db, value)
                    setattr(ticket, field, value)

            if changed:
                TicketActivityService.record(
                    db, ticket.id, user_id, ActivityType.UPDATE, f"Updated {', '.join(changed)}"
                )
            db.flush()
            db.refresh(ticket)

            logger.info(f"Updated ticket {ticket_id}: {changed or 'no changes'}")
            return ticket_to_dict(ticket)

    @staticmethod
    async def delete_ticket(ticket_id: int) -> None:
        with get_db() as db:
            ticket = db.query(Ticket).filter(Ticket.id == ticket_id).first()
            if not ticket:
                raise NotFoundError("Ticket not found")
            db.delete(ticket)
        logger.info(f"Deleted ticket {ticket_id}")

    @staticmethod
    async def move_ticket_stage(ticket_id: int, stage: str, user_id: Optional[int]) -> Dict[str, Any]:
        """Move a ticket to the end of another Kanban stage and log the move."""
        if not stage:
            raise ValueError("Stage is required")
        _check_choice(stage, KanbanStage, "stage")

        with get_db() as db:
            ticket = TicketService._load(db, ticket_id)
            from_stage = ticket.stage

            ticket.position = TicketService._next_position(db, stage)
            ticket.stage = stage

            TicketActivityService.record(
                db,
                ticket.id,
                user_id,
                ActivityType.MOVE,
                f"Moved from {from_stage or '?'} to {stage}",
                from_stage=from_stage,
                to_stage=stage,
            )
            db.flush()
            db.refresh(ticket)

            logger.info(f"Ticket {ticket_id} moved {from_stage} -> {stage} (position {ticket.position})")
            return ticket_to_dict(ticket)

    @staticmethod
    async def reorder_tickets(stage: str, order: List[int]) -> Dict[str, int]:
        """
        Persist the display order of one stage.

        Every id in ``order`` is placed in ``stage`` with ``position`` equal to
        its index. All updates happen in one transaction; if any id is unknown
        nothing is written.
        """
        if not stage:
            raise ValueError("Stage is required")
        _check_choice(stage, KanbanStage, "stage")
        if not isinstance(order, list) or not all(isinstance(i, int) for i in order):
            raise ValueError("Order must be a list of ticket ids")
        if len(set(order)) != len(order):
            raise ValueError("Order contains duplicate ticket ids")

        with get_db() as db:
            tickets = {t.id: t for t in db.query(Ticket).filter(Ticket.id.in_(order)).all()}
            missing = [i for i in order if i not in tickets]
            if missing:
                raise NotFoundError(f"Tickets not found: {', '.join(str(i) for i in missing)}")

            for index, ticket_id in enumerate(order):
                ticket = tickets[ticket_id]
                ticket.stage = stage
                ticket.position = index

        logger.info(f"Reordered {len(order)} tickets in {stage}")
        return {"updated": len(order)}
