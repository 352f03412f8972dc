"""Tests for the AI assistant completion service."""

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
import requests

from src.c2_chat_service import ChatService, GeminiProvider, OpenAIChatProvider, get_chat_provider
from src.core.config import reload_settings
from src.core.errors import ExternalServiceError

CONTENTS = [
    {"role": "user", "parts": [{"text": "How do I reset my password?"}]},
    {"role": "model", "parts": [{"text": "Open the profile page."}]},
    {"role": "user", "parts": [{"text": "And then?"}]},
]
GEMINI_ANSWER = {"candidates": [{"content": {"role": "model", "parts": [{"text": "Click reset."}]}}]}


def _response(status_code, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = payload if payload is not None else {}
    return response


@pytest.fixture
def gemini():
    return GeminiProvider("test-key", model="gemini-test", max_retries=3, initial_delay=0)


class TestGeminiProvider:
    """Test the REST client and its retry policy."""

    @pytest.mark.asyncio
    async def test_request_body(self, gemini):
        with patch("src.c2_chat_service.chat_service.requests.post", return_value=_response(200, GEMINI_ANSWER)) as post:
            result = await gemini.generate(CONTENTS, {"temperature": 0.2})

        assert result == GEMINI_ANSWER
        args, kwargs = post.call_args
        assert args[0].endswith("/models/gemini-test:generateContent")
        assert kwargs["params"] == {"key": "test-key"}
        assert kwargs["json"] == {"contents": CONTENTS, "generationConfig": {"temperature": 0.2}}

    @pytest.mark.asyncio
    async def test_retries_when_overloaded(self, gemini):
        """503 and 429 are retried; the first good answer wins."""
        responses = [_response(503), _response(429), _response(200, GEMINI_ANSWER)]

        with patch("src.c2_chat_service.chat_service.requests.post", side_effect=responses) as post:
            result = await gemini.generate(CONTENTS)

        assert result == GEMINI_ANSWER
        assert post.call_count == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, gemini):
        overloaded = _response(503, {"error": {"message": "The model is overloaded."}})

        with patch("src.c2_chat_service.chat_service.requests.post", return_value=overloaded) as post:
            with pytest.raises(ExternalServiceError) as exc_info:
                await gemini.generate(CONTENTS)

        assert post.call_count == 3
        assert exc_info.value.message == "The model is overloaded."
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self, gemini):
        with patch("src.c2_chat_service.chat_service.requests.post", return_value=_response(400)) as post:
            with pytest.raises(ExternalServiceError, match="Gemini API error: 400"):
                await gemini.generate(CONTENTS)

        assert post.call_count == 1

    @pytest.mark.asyncio
    async def test_connection_errors_are_retried(self, gemini):
        failures = [requests.ConnectionError("reset"), _response(200, GEMINI_ANSWER)]

        with patch("src.c2_chat_service.chat_service.requests.post", side_effect=failures) as post:
            assert await gemini.generate(CONTENTS) == GEMINI_ANSWER

        assert post.call_count == 2

    @pytest.mark.asyncio
    async def test_unreachable(self, gemini):
        with patch("src.c2_chat_service.chat_service.requests.post", side_effect=requests.Timeout("slow")):
            with pytest.raises(ExternalServiceError, match="Could not reach the Gemini API"):
                await gemini.generate(CONTENTS)


class TestOpenAIChatProvider:

    def test_to_messages(self):
        messages = OpenAIChatProvider.to_messages(CONTENTS)

        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        assert messages[1]["content"] == "Open the profile page."

    def test_multi_part_text_is_joined(self):
        messages = OpenAIChatProvider.to_messages([{"role": "user", "parts": [{"text": "a"}, {"text": "b"}]}])

        assert messages == [{"role": "user", "content": "ab"}]

    def test_to_options(self):
        options = OpenAIChatProvider.to_options(
            {"temperature": 0.5, "topP": 0.9, "maxOutputTokens": 256, "stopSequences": ["END"], "topK": 3}
        )

        assert options == {"temperature": 0.5, "top_p": 0.9, "max_tokens": 256, "stop": ["END"]}

    @pytest.mark.asyncio
    async def test_answer_in_gemini_format(self):
        provider = OpenAIChatProvider("sk-test", model="gpt-test")
        provider.client = MagicMock()
        provider.client.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="Click reset."), finish_reason="stop")]
        )

        result = await provider.generate(CONTENTS, {"maxOutputTokens": 100})

        assert result["candidates"][0]["content"]["parts"] == [{"text": "Click reset."}]
        assert result["candidates"][0]["finishReason"] == "STOP"
        assert result["modelVersion"] == "gpt-test"
        kwargs = provider.client.chat.completions.create.call_args.kwargs
        assert kwargs["max_tokens"] == 100
        assert kwargs["model"] == "gpt-test"


class TestProviderSelection:

    def test_missing_gemini_key(self):
        with pytest.raises(ExternalServiceError, match="GEMINI_API_KEY is not configured"):
            get_chat_provider()

    def test_gemini_selected_by_default(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        reload_settings()

        provider = get_chat_provider()

        assert isinstance(provider, GeminiProvider)
        assert provider.api_key == "g-key"

    def test_openai_selected(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "openai")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        reload_settings()

        assert isinstance(get_chat_provider(), OpenAIChatProvider)


class TestChatService:

    @pytest.mark.asyncio
    async def test_forwards_to_provider(self, mock_chat_provider):
        result = await ChatService.generate_completion(CONTENTS, {"temperature": 1}, provider=mock_chat_provider)

        assert result["candidates"][0]["content"]["parts"][0]["text"] == "Mock response"
        assert mock_chat_provider.last_request == {"contents": CONTENTS, "generation_config": {"temperature": 1}}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("contents", [None, [], "hello", {"role": "user"}])
    async def test_contents_must_be_a_list(self, contents, mock_chat_provider):
        with pytest.raises(ValueError):
            await ChatService.generate_completion(contents, provider=mock_chat_provider)

        assert mock_chat_provider.call_count == 0


class TestCompletionEndpoint:

    def test_requires_login(self, client):
        assert client.post("/api/chat/completion", json={"contents": CONTENTS}).status_code == 401

    def test_missing_key_is_500(self, client, regular_user):
        response = client.post("/api/chat/completion", json={"contents": CONTENTS}, headers=regular_user.headers)

        assert response.status_code == 500
        assert response.json() == {"error": "GEMINI_API_KEY is not configured on the server"}

    def test_completion(self, client, regular_user, mock_chat_provider):
        with patch("src.c2_chat_service.chat_service.get_chat_provider", return_value=mock_chat_provider):
            response = client.post(
                "/api/chat/completion",
                json={"contents": CONTENTS, "generationConfig": {"temperature": 0.1}},
                headers=regular_user.headers,
            )

        assert response.status_code == 200
        assert response.json()["modelVersion"] == "mock-model"
        assert mock_chat_provider.last_request["generation_config"] == {"temperature": 0.1}

    def test_empty_contents_is_400(self, client, regular_user):
        response = client.post("/api/chat/completion", json={"contents": []}, headers=regular_user.headers)

        assert response.status_code == 400
