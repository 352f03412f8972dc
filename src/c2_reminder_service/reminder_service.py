"""Service layer for personal reminders."""

import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Dict, Any

from sqlalchemy import func

from src.core.database import get_db, Reminder
from src.core.errors import NotFoundError
from src.core.time_utils import to_iso, utcnow
from src.c1_ticket_enums import ReminderPriority

logger = logging.getLogger(__name__)


def parse_due_date(value) -> Optional[datetime]:
    """Accepts ``YYYY-MM-DD`` (midnight), an ISO datetime, or date/datetime objects."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        try:
            if "T" in text:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            else:
                parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
        except ValueError:
            raise ValueError(f"Invalid due date: {value}")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _start_of_today() -> datetime:
    return datetime.combine(utcnow().date(), datetime.min.time())


def _check_priority(priority: Optional[str]) -> None:
    allowed = [p.value for p in ReminderPriority]
    if priority is not None and priority not in allowed:
        raise ValueError(f"Invalid priority: {priority}. Allowed: {', '.join(allowed)}")


def reminder_to_dict(reminder: Reminder) -> Dict[str, Any]:
    return {
        "id": reminder.id,
        "user_id": reminder.user_id,
        "title": reminder.title,
        "description": reminder.description,
        "due_date": to_iso(reminder.due_date),
        "recurring": reminder.recurring,
        "completed": reminder.completed,
        "last_completed_at": to_iso(reminder.last_completed_at),
        "priority": reminder.priority,
        "category": reminder.category,
        "order": reminder.order,
        "created_at": to_iso(reminder.created_at),
        "updated_at": to_iso(reminder.updated_at),
    }


class ReminderService:
    """CRUD, ordering and counters for a user's reminders."""

    @staticmethod
    def _reset_recurring(db, user_id: int) -> int:
        """Reopen recurring reminders completed before today."""
        reset = (
            db.query(Reminder)
            .filter(
                Reminder.user_id == user_id,
                Reminder.recurring.is_(True),
                Reminder.completed.is_(True),
                Reminder.last_completed_at < _start_of_today(),
            )
            .update({Reminder.completed: False}, synchronize_session=False)
        )
        if reset:
            logger.info(f"Reopened {reset} recurring reminders for user {user_id}")
        return reset

    @staticmethod
    def _owned(db, reminder_id: str, user_id: int) -> Reminder:
        reminder = db.query(Reminder).filter(Reminder.id == reminder_id).first()
        if not reminder or reminder.user_id != user_id:
            raise NotFoundError("Reminder not found")
        return reminder

    @staticmethod
    async def list_reminders(user_id: int) -> List[Dict[str, Any]]:
        """Open reminders first, then by manual order, then newest."""
        with get_db() as db:
            ReminderService._reset_recurring(db, user_id)
            reminders = (
                db.query(Reminder)
                .filter(Reminder.user_id == user_id)
                .order_by(
                    Reminder.completed.asc(),
                    Reminder.order.is_(None),
                    Reminder.order.asc(),
                    Reminder.created_at.desc(),
                )
                .all()
            )
            return [reminder_to_dict(r) for r in reminders]

    @staticmethod
    async def create_reminder(user_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        title = (data.get("title") or "").strip()
        if not title:
            raise ValueError("Title is required")
        _check_priority(data.get("priority"))

        with get_db() as db:
            reminder = Reminder(
                user_id=user_id,
                title=title,
                description=data.get("description") or "",
                due_date=parse_due_date(data.get("due_date")),
                recurring=bool(data.get("recurring")),
                priority=data.get("priority") or ReminderPriority.MEDIA.value,
                category=data.get("category") or None,
                order=data.get("order") if isinstance(data.get("order"), int) else None,
            )
            db.add(reminder)
            db.flush()
            logger.info(f"Reminder {reminder.id} created for user {user_id}")
            return reminder_to_dict(reminder)

    @staticmethod
    async def update_reminder(reminder_id: str, user_id: int, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Partial update of an owned reminder; completing it stamps ``last_completed_at``."""
        _check_priority(updates.get("priority"))
        if "title" in updates and not (updates["title"] or "").strip():
            raise ValueError("Title cannot be empty")

        with get_db() as db:
            reminder = ReminderService._owned(db, reminder_id, user_id)

            for field in ("title", "description", "priority", "category", "order", "recurring"):
                if field in updates and updates[field] is not None:
                    setattr(reminder, field, updates[field])
            if "category" in updates and updates["category"] is None:
                reminder.category = None
            if "due_date" in updates:
                reminder.due_date = parse_due_date(updates["due_date"])
            if updates.get("completed") is not None:
                reminder.completed = bool(updates["completed"])
                if reminder.completed:
                    reminder.last_completed_at = utcnow()

            db.flush()
            return reminder_to_dict(reminder)

    @staticmethod
    async def delete_reminder(reminder_id: str, user_id: int) -> None:
        with get_db() as db:
            db.delete(ReminderService._owned(db, reminder_id, user_id))
        logger.info(f"Reminder {reminder_id} deleted by user {user_id}")

    @staticmethod
    async def reorder_reminders(user_id: int, items: List[Dict[str, Any]]) -> Dict[str, int]:
        """Apply ``[{id, order}]``; ids the user does not own are ignored."""
        if not isinstance(items, list):
            raise ValueError("Items must be a list")

        with get_db() as db:
            ids = [item.get("id") for item in items if item.get("id")]
            owned = {
                r.id: r
                for r in db.query(Reminder).filter(Reminder.id.in_(ids), Reminder.user_id == user_id).all()
            }
            updated = 0
            for item in items:
                reminder = owned.get(item.get("id"))
                if reminder is None:
                    continue
                if item.get("order") is not None:
                    reminder.order = item["order"]
                updated += 1

        return {"updated": updated}

    @staticmethod
    async def get_counts(user_id: int) -> Dict[str, int]:
        """Open, urgent and overdue reminder counts."""
        with get_db() as db:
            ReminderService._reset_recurring(db, user_id)
            db.flush()

            def count(*criteria) -> int:
                return (
                    db.query(func.count(Reminder.id))
                    .filter(Reminder.user_id == user_id, Reminder.completed.is_(False), *criteria)
                    .scalar()
                )

            return {
                "pending": count(),
                "urgent": count(Reminder.priority == ReminderPriority.URGENTE.value),
                "overdue": count(Reminder.due_date < _start_of_today()),
            }
