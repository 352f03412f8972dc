"""C3 Document Routes - per-user document library."""
from src.c3_document_routes.document_routes import create_document_router
__all__ = ["create_document_router"]
