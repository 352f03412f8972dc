"""User database model for TicketDesk."""

from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    DateTime,
    Boolean,
    CheckConstraint,
    Index,
)

from src.c1_database_session import Base
from src.core.time_utils import utcnow


class User(Base):
    """Application user, authenticated by password or a social provider."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(Text)  # NULL for OAuth-only accounts
    name = Column(String(255))
    avatar = Column(Text)
    role = Column(
        String(20),
        CheckConstraint("role IN ('user', 'admin')"),
        default="user",
        nullable=False,
    )
    can_edit_kanban = Column(Boolean, default=False, nullable=False)

    # Social login linkage
    provider = Column(String(20))  # google, github
    provider_id = Column(String(255))

    # Password reset (token stored as sha256 hex)
    reset_password_token = Column(String(64), index=True)
    reset_password_expires = Column(DateTime)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_users_provider", "provider", "provider_id"),
    )

    @property
    def is_oauth_only(self) -> bool:
        return not self.password_hash and bool(self.provider)

    def to_summary(self, include_avatar: bool = True) -> dict:
        """Compact representation embedded in tickets, comments and activities."""
        data = {"id": self.id, "name": self.name, "email": self.email}
        if include_avatar:
            data["avatar"] = self.avatar
        return data
