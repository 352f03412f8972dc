"""Knowledge-base manual model for TicketDesk."""

import uuid

from sqlalchemy import Column, String, Text, Integer, DateTime, Boolean, ForeignKey

from src.c1_database_session.base import Base
from src.core.time_utils import utcnow


class Manual(Base):
    """Markdown manual; global manuals are visible to every user."""

    __tablename__ = "manuals"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False, default="")
    is_global = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
