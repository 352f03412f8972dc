"""C2 Manual Service - Knowledge-base manuals."""
from src.c2_manual_service.manual_service import ManualService
__all__ = ["ManualService"]
