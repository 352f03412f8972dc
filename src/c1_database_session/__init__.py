"""Database session management for TicketDesk."""

from src.c1_database_session.base import Base
from src.c1_database_session.database_manager import (
    DatabaseManager,
    get_db,
    get_db_manager,
    reset_db_manager,
)

__all__ = ["Base", "DatabaseManager", "get_db", "get_db_manager", "reset_db_manager"]
