from src.c1_reminder_models.reminder import Reminder

__all__ = ["Reminder"]
