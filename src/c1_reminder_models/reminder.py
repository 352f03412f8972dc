"""Personal reminder model for TicketDesk."""

import uuid

from sqlalchemy import Column, String, Text, Integer, DateTime, Boolean, ForeignKey, CheckConstraint, Index

from src.c1_database_session.base import Base
from src.core.time_utils import utcnow


def _new_id() -> str:
    return str(uuid.uuid4())


class Reminder(Base):
    """To-do item owned by one user; recurring reminders reopen every day."""

    __tablename__ = "reminders"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(500), nullable=False)
    description = Column(Text, default="", nullable=False)
    due_date = Column(DateTime)
    recurring = Column(Boolean, default=False, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    last_completed_at = Column(DateTime)
    priority = Column(
        String(10),
        CheckConstraint("priority IN ('baixa', 'media', 'alta', 'urgente')"),
        default="media",
        nullable=False,
    )
    category = Column(String(100))
    order = Column(Integer)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_reminders_user_completed", "user_id", "completed"),
    )
