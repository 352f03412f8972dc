"""LLM completion service behind the dashboard's AI assistant.

The API speaks the Gemini ``generateContent`` format in both directions.
The OpenAI provider translates to and from chat messages so the dashboard
does not need to know which provider is configured.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import openai
import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.core.config import get_settings
from src.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

# Statuses that mean "overloaded, try again"
RETRYABLE_STATUSES = (429, 503)


class RetryableUpstreamError(Exception):
    """Upstream answered with a status worth retrying."""

    def __init__(self, response: requests.Response):
        super().__init__(f"Upstream returned {response.status_code}")
        self.response = response


def _upstream_message(response: requests.Response, provider: str) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return f"{provider} API error: {response.status_code}"


class ChatProvider(ABC):
    """A backend able to answer a Gemini-format completion request."""

    @abstractmethod
    async def generate(
        self, contents: List[Dict[str, Any]], generation_config: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Return a Gemini-format ``generateContent`` response."""
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        pass


class GeminiProvider(ChatProvider):
    """Google Gemini through the REST ``generateContent`` endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        max_retries: int = 3,
        initial_delay: float = 1.0,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        # Waits initial_delay, 2 * initial_delay, ... between attempts
        self._post_with_retry = retry(
            stop=stop_after_attempt(max_retries),
            wait=wait_exponential(multiplier=initial_delay, max=30),
            retry=retry_if_exception_type(
                (RetryableUpstreamError, requests.ConnectionError, requests.Timeout)
            ),
            before_sleep=self._log_retry,
            reraise=True,
        )(self._post_once)

    @staticmethod
    def _log_retry(retry_state):
        error = retry_state.outcome.exception()
        logger.warning(
            f"Gemini call failed ({error}); retry {retry_state.attempt_number} "
            f"in {retry_state.next_action.sleep:.1f}s"
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def _post_once(self, body: Dict[str, Any]) -> requests.Response:
        response = await asyncio.to_thread(
            requests.post,
            self.url,
            params={"key": self.api_key},
            json=body,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )
        if response.status_code in RETRYABLE_STATUSES:
            raise RetryableUpstreamError(response)
        return response

    async def generate(
        self, contents: List[Dict[str, Any]], generation_config: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"contents": contents}
        if generation_config:
            body["generationConfig"] = generation_config

        try:
            response = await self._post_with_retry(body)
        except RetryableUpstreamError as e:
            response = e.response
        except requests.RequestException as e:
            logger.error(f"Gemini request failed after retries: {e}")
            raise ExternalServiceError(f"Could not reach the Gemini API: {e}", status_code=500)

        if not response.ok:
            message = _upstream_message(response, "Gemini")
            logger.error(f"Gemini returned {response.status_code}: {message}")
            raise ExternalServiceError(message, status_code=500)

        return response.json()

    def get_model_name(self) -> str:
        return self.model


class OpenAIChatProvider(ChatProvider):
    """OpenAI chat completions, exposed in the Gemini response format."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 60.0):
        self.client = openai.OpenAI(api_key=api_key, timeout=timeout)
        self.model = model
        logger.info(f"Initialized OpenAI chat provider with model: {self.model}")

    @staticmethod
    def to_messages(contents: List[Dict[str, Any]]) -> List[Dict[str, str]]:
        """Gemini ``contents`` to OpenAI chat messages (``model`` becomes ``assistant``)."""
        messages = []
        for item in contents:
            role = item.get("role") or "user"
            text = "".join(part.get("text", "") for part in item.get("parts", []) if isinstance(part, dict))
            messages.append({"role": "assistant" if role == "model" else role, "content": text})
        return messages

    @staticmethod
    def to_options(generation_config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        config = generation_config or {}
        options = {}
        if "temperature" in config:
            options["temperature"] = config["temperature"]
        if "topP" in config:
            options["top_p"] = config["topP"]
        if "maxOutputTokens" in config:
            options["max_tokens"] = config["maxOutputTokens"]
        if "stopSequences" in config:
            options["stop"] = config["stopSequences"]
        return options

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=10),
        retry=retry_if_exception_type((openai.APIConnectionError, openai.RateLimitError)),
        reraise=True,
    )
    async def _complete(self, messages: List[Dict[str, str]], options: Dict[str, Any]):
        return await asyncio.to_thread(
            self.client.chat.completions.create, model=self.model, messages=messages, **options
        )

    async def generate(
        self, contents: List[Dict[str, Any]], generation_config: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        try:
            completion = await self._complete(self.to_messages(contents), self.to_options(generation_config))
        except openai.OpenAIError as e:
            logger.error(f"OpenAI completion failed: {e}")
            raise ExternalServiceError(f"OpenAI API error: {e}", status_code=500)

        choice = completion.choices[0]
        return {
            "candidates": [
                {
                    "content": {"role": "model", "parts": [{"text": choice.message.content or ""}]},
                    "finishReason": (choice.finish_reason or "stop").upper(),
                }
            ],
            "modelVersion": self.model,
        }

    def get_model_name(self) -> str:
        return self.model


def get_chat_provider() -> ChatProvider:
    """Build the provider selected in the settings."""
    config = get_settings().llm

    if config.provider == "openai":
        if not config.openai_api_key:
            raise ExternalServiceError("OPENAI_API_KEY is not configured on the server", status_code=500)
        return OpenAIChatProvider(
            config.openai_api_key.get_secret_value(), model=config.openai_model, timeout=config.request_timeout
        )

    if not config.gemini_api_key:
        raise ExternalServiceError("GEMINI_API_KEY is not configured on the server", status_code=500)
    return GeminiProvider(
        config.gemini_api_key.get_secret_value(),
        model=config.model,
        base_url=config.gemini_base_url,
        max_retries=config.max_retries,
        initial_delay=config.retry_initial_delay,
        timeout=config.request_timeout,
    )


class ChatService:

    @staticmethod
    async def generate_completion(
        contents: Any,
        generation_config: Optional[Dict[str, Any]] = None,
        provider: Optional[ChatProvider] = None,
    ) -> Dict[str, Any]:
        """Forward a completion request to the configured LLM provider."""
        if not isinstance(contents, list) or not contents:
            raise ValueError("contents must be a non-empty list")

        provider = provider or get_chat_provider()
        logger.info(f"Chat completion with {provider.get_model_name()} ({len(contents)} messages)")
        return await provider.generate(contents, generation_config)
