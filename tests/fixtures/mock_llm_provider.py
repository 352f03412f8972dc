"""Mock chat provider for testing without API keys.

Returns predictable Gemini-format responses and records every request so
tests can assert on what the service forwarded.
"""

from typing import Any, Dict, List, Optional

from src.c2_chat_service import ChatProvider


class MockChatProvider(ChatProvider):
    """Chat provider that answers without calling any API.

    Usage:
        provider = MockChatProvider(reply="Hello")
        response = await ChatService.generate_completion(contents, provider=provider)
        assert provider.call_count == 1
    """

    def __init__(self, reply: str = "Mock response", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.call_count = 0
        self.requests: List[Dict[str, Any]] = []

    async def generate(
        self, contents: List[Dict[str, Any]], generation_config: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        self.call_count += 1
        self.requests.append({"contents": contents, "generation_config": generation_config})
        if self.error is not None:
            raise self.error

        return {
            "candidates": [
                {
                    "content": {"role": "model", "parts": [{"text": self.reply}]},
                    "finishReason": "STOP",
                }
            ],
            "modelVersion": self.get_model_name(),
        }

    def get_model_name(self) -> str:
        return "mock-model"

    @property
    def last_request(self) -> Optional[Dict[str, Any]]:
        return self.requests[-1] if self.requests else None

    def reset(self):
        self.call_count = 0
        self.requests = []
