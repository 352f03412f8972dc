"""Uploaded document model for TicketDesk."""

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from src.c1_database_session.base import Base
from src.core.time_utils import utcnow


class Document(Base):
    """A file uploaded by a user to the document library."""

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    filename = Column(String(500), unique=True, nullable=False)  # Stored name in the uploads dir
    file_type = Column(String(255), nullable=False)  # MIME type
    size = Column(Integer, nullable=False)
    url = Column(Text, nullable=False)
    category = Column(String(100))
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User")
