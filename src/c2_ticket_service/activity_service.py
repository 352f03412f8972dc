"""Service layer for the ticket activity log."""

import logging
from typing import Optional, Dict, Any, List
from sqlalchemy.orm import Session, joinedload

from src.core.database import get_db, Ticket, TicketActivity
from src.core.errors import NotFoundError
from src.core.time_utils import to_iso
from src.c1_ticket_enums import ActivityType

logger = logging.getLogger(__name__)


def activity_to_dict(activity: TicketActivity) -> Dict[str, Any]:
    return {
        "id": activity.id,
        "ticket_id": activity.ticket_id,
        "type": activity.type,
        "from_stage": activity.from_stage,
        "to_stage": activity.to_stage,
        "message": activity.message,
        "created_at": to_iso(activity.created_at),
        "user": activity.user.to_summary(include_avatar=False) if activity.user else None,
    }


class TicketActivityService:
    """Records and lists the audit trail of a ticket."""

    @staticmethod
    def record(
        db: Session,
        ticket_id: int,
        user_id: Optional[int],
        activity_type: ActivityType,
        message: Optional[str] = None,
        from_stage: Optional[str] = None,
        to_stage: Optional[str] = None,
    ) -> TicketActivity:
        """Add an activity entry inside the caller's transaction."""
        activity = TicketActivity(
            ticket_id=ticket_id,
            user_id=user_id,
            type=ActivityType(activity_type).value,
            from_stage=from_stage,
            to_stage=to_stage,
            message=message,
        )
        db.add(activity)
        logger.debug(f"Recorded {activity.type} activity on ticket {ticket_id}")
        return activity

    @staticmethod
    async def list_activities(ticket_id: int) -> List[Dict[str, Any]]:
        """Activities of a ticket, newest first."""
        with get_db() as db:
            if not db.query(Ticket.id).filter(Ticket.id == ticket_id).first():
                raise NotFoundError("Ticket not found")

            activities = (
                db.query(TicketActivity)
                .options(joinedload(TicketActivity.user))
                .filter(TicketActivity.ticket_id == ticket_id)
                .order_by(TicketActivity.created_at.desc(), TicketActivity.id.desc())
                .all()
            )
            return [activity_to_dict(a) for a in activities]
