"""Ticket-related models for TicketDesk."""

from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    DateTime,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship

from src.c1_database_session.base import Base
from src.core.time_utils import utcnow


class Ticket(Base):
    """Helpdesk ticket, also a card on the Kanban board."""

    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_number = Column(Integer, index=True)  # Number in the upstream helpdesk system

    # Core Fields
    title = Column(String(500), nullable=False)
    description = Column(Text)
    status = Column(
        String(20),
        CheckConstraint("status IN ('aberto', 'fechado', 'pendente', 'em_andamento')"),
        default="aberto",
        nullable=False,
    )
    priority = Column(
        String(10),
        CheckConstraint("priority IN ('baixa', 'media', 'alta')"),
        default="media",
        nullable=False,
    )
    type = Column(String(30), default="outros", nullable=False)  # see TicketType
    url = Column(Text)
    registration_date = Column(DateTime, index=True)  # When the request was registered

    # Kanban
    stage = Column(String(20), default="backlog", nullable=False)
    position = Column(Integer, default=0, nullable=False)  # Order inside the stage

    creator_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    assignee_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))

    # Metadata
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    creator = relationship("User", foreign_keys=[creator_id])
    assignee = relationship("User", foreign_keys=[assignee_id])
    comments = relationship(
        "TicketComment", back_populates="ticket", cascade="all, delete-orphan", passive_deletes=True
    )
    activities = relationship(
        "TicketActivity", back_populates="ticket", cascade="all, delete-orphan", passive_deletes=True
    )
    followers = relationship(
        "TicketFollower", back_populates="ticket", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        Index("idx_tickets_stage_position", "stage", "position"),
        Index("idx_tickets_status_priority", "status", "priority"),
    )


class TicketComment(Base):
    """Comments and discussions on tickets."""

    __tablename__ = "ticket_comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    ticket = relationship("Ticket", back_populates="comments")
    user = relationship("User")


class TicketActivity(Base):
    """Audit trail entry for a ticket (create, update, stage move, comment)."""

    __tablename__ = "ticket_activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    type = Column(
        String(20),
        CheckConstraint("type IN ('create', 'update', 'move', 'comment')"),
        nullable=False,
    )
    from_stage = Column(String(20))
    to_stage = Column(String(20))
    message = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    ticket = relationship("Ticket", back_populates="activities")
    user = relationship("User")


class TicketFollower(Base):
    """A user following a ticket's discussion."""

    __tablename__ = "ticket_followers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    ticket = relationship("Ticket", back_populates="followers")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("ticket_id", "user_id", name="uq_ticket_follower"),
    )
