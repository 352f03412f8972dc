"""Support workflow (decision tree) model for TicketDesk."""

import uuid

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, JSON

from src.c1_database_session.base import Base
from src.core.time_utils import utcnow


class Workflow(Base):
    """Decision-tree guide drawn in the dashboard.

    ``nodes`` holds the graph exactly as the editor sends it; the server
    stores it and never walks it.
    """

    __tablename__ = "workflows"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text)
    category = Column(String(100))
    nodes = Column(JSON)
    start_node_id = Column(String(100))
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
