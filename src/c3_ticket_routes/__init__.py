"""C3 Ticket Routes - tickets, Kanban, comments and statistics."""
from src.c3_ticket_routes.ticket_routes import create_ticket_router
__all__ = ["create_ticket_router"]
