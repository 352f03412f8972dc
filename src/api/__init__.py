"""HTTP application for TicketDesk."""
from src.api.server import create_app
__all__ = ["create_app"]
