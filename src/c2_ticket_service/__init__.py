"""C2 Ticket Service - Ticket management, Kanban and dashboard statistics."""
from src.c2_ticket_service.ticket_service import TicketService
from src.c2_ticket_service.activity_service import TicketActivityService
from src.c2_ticket_service.comment_service import TicketCommentService
from src.c2_ticket_service.stats_service import TicketStatsService
from src.c2_ticket_service.import_service import TicketImportService
__all__ = [
    "TicketService",
    "TicketActivityService",
    "TicketCommentService",
    "TicketStatsService",
    "TicketImportService",
]
