"""C2 Report Service - Saved period reports."""
from src.c2_report_service.report_service import ReportService
__all__ = ["ReportService"]
