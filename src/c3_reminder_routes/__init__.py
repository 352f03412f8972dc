"""C3 Reminder Routes - personal reminders."""
from src.c3_reminder_routes.reminder_routes import create_reminder_router
__all__ = ["create_reminder_router"]
