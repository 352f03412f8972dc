"""C3 Report Routes - saved weekly, monthly and quarterly reports."""
from src.c3_report_routes.report_routes import create_report_router
__all__ = ["create_report_router"]
