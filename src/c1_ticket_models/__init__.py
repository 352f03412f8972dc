"""Ticket models for TicketDesk."""

from src.c1_ticket_models.ticket import Ticket, TicketComment, TicketActivity, TicketFollower

__all__ = ["Ticket", "TicketComment", "TicketActivity", "TicketFollower"]
