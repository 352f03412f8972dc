"""Database manager and session utilities for TicketDesk."""

import logging
from pathlib import Path
from typing import Optional
from contextlib import contextmanager
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.c1_database_session.base import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manager for database operations."""

    def __init__(self, database_url: str = "sqlite:///data/ticketdesk.db", echo: bool = False):
        """Initialize database connection."""
        self.database_url = database_url
        engine_kwargs = {"echo": echo}

        if database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                engine_kwargs["poolclass"] = StaticPool
            else:
                self._ensure_sqlite_directory(database_url)

        self.engine = create_engine(database_url, **engine_kwargs)

        if database_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine
        )

    @staticmethod
    def _ensure_sqlite_directory(database_url: str):
        path = database_url.split("///", 1)[-1]
        if path:
            Path(path).parent.mkdir(parents=True, exist_ok=True)

    def create_tables(self):
        """Create all database tables."""
        # Registers every model on Base.metadata
        import src.core.database  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Database tables ready at {self.database_url}")

    def get_session(self):
        """Get a database session."""
        return self.SessionLocal()

    def drop_tables(self):
        """Drop all database tables (for testing)."""
        import src.core.database  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """Return the process-wide manager for the configured database URL."""
    global _db_manager
    from src.core.config import get_settings

    db_settings = get_settings().database
    if _db_manager is None or _db_manager.database_url != db_settings.database_url:
        if _db_manager is not None:
            _db_manager.dispose()
        _db_manager = DatabaseManager(db_settings.database_url, echo=db_settings.echo)
    return _db_manager


def reset_db_manager():
    """Forget the cached manager (used by tests after switching databases)."""
    global _db_manager
    if _db_manager is not None:
        _db_manager.dispose()
    _db_manager = None


@contextmanager
def get_db():
    """Provide a transactional scope around a series of operations."""
    db = get_db_manager().get_session()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
