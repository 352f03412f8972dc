"""Database models and schema for TicketDesk.

Single import point for every model so that ``Base.metadata`` knows all
tables before ``create_all`` runs. Model definitions live in the c1 layer
packages.
"""

# Import Base from c1 layer (shared base for all models)
from src.c1_database_session.base import Base, logger

from src.c1_user_models.user import User  # noqa: E402
from src.c1_ticket_models.ticket import (  # noqa: E402
    Ticket, TicketComment, TicketActivity, TicketFollower
)
from src.c1_document_models.document import Document  # noqa: E402
from src.c1_reminder_models.reminder import Reminder  # noqa: E402
from src.c1_manual_models.manual import Manual  # noqa: E402
from src.c1_workflow_models.workflow import Workflow  # noqa: E402
from src.c1_report_models.report import (  # noqa: E402
    WeeklyReport, MonthlyReport, QuarterlyReport
)

from src.c1_database_session.database_manager import DatabaseManager, get_db  # noqa: E402


__all__ = [
    "Base",
    "logger",
    "User",
    "Ticket",
    "TicketComment",
    "TicketActivity",
    "TicketFollower",
    "Document",
    "Reminder",
    "Manual",
    "Workflow",
    "WeeklyReport",
    "MonthlyReport",
    "QuarterlyReport",
    "DatabaseManager",
    "get_db",
]
