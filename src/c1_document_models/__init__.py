"""Document models for TicketDesk."""

from src.c1_document_models.document import Document

__all__ = ["Document"]
