"""Ticket enumerations for TicketDesk."""

from src.c1_ticket_enums.ticket_enums import (
    TicketStatus,
    TicketPriority,
    TicketType,
    KanbanStage,
    ActivityType,
    ReminderPriority,
    UserRole,
    ROOT_CAUSE_BY_TYPE,
    DEFAULT_ROOT_CAUSE,
    root_cause_for,
)

__all__ = [
    "TicketStatus",
    "TicketPriority",
    "TicketType",
    "KanbanStage",
    "ActivityType",
    "ReminderPriority",
    "UserRole",
    "ROOT_CAUSE_BY_TYPE",
    "DEFAULT_ROOT_CAUSE",
    "root_cause_for",
]
