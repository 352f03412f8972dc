"""C2 Chat Service - LLM completions for the dashboard assistant."""
from src.c2_chat_service.chat_service import (
    ChatService,
    ChatProvider,
    GeminiProvider,
    OpenAIChatProvider,
    get_chat_provider,
)
__all__ = ["ChatService", "ChatProvider", "GeminiProvider", "OpenAIChatProvider", "get_chat_provider"]
