"""C3 Manual Routes - personal and global manuals."""
from src.c3_manual_routes.manual_routes import create_manual_router
__all__ = ["create_manual_router"]
