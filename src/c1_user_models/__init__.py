"""User models for TicketDesk."""

from src.c1_user_models.user import User

__all__ = ["User"]
