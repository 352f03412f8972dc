"""Report models for TicketDesk."""

from src.c1_report_models.report import WeeklyReport, MonthlyReport, QuarterlyReport

__all__ = ["WeeklyReport", "MonthlyReport", "QuarterlyReport"]
