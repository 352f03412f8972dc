"""C2 Reminder Service - Personal reminders."""
from src.c2_reminder_service.reminder_service import ReminderService
__all__ = ["ReminderService"]
