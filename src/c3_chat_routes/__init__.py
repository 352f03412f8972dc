"""C3 Chat Routes - AI assistant."""
from src.c3_chat_routes.chat_routes import create_chat_router
__all__ = ["create_chat_router"]
