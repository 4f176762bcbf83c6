from __future__ import annotations

import logging
from typing import Protocol

import httpx

from notesum.types import LLMConfig, PromptMessages

logger = logging.getLogger(__name__)

NO_SUMMARY_FALLBACK = "No summary available"

PROVIDER_BASE_URLS: dict[str, str] = {
    "openai": "https://api.openai.com/v1",
    "anthropic": "https://api.anthropic.com/v1",
    "deepseek": "https://api.deepseek.com/v1",
}


class LLMClientError(RuntimeError):
    pass


class UnsupportedProviderError(LLMClientError):
    def __init__(self, provider: str) -> None:
        super().__init__(f"Unsupported provider: {provider}")
        self.provider = provider


class CompletionError(LLMClientError):
    pass


class LLMClient(Protocol):
    def complete(self, messages: PromptMessages, config: LLMConfig) -> str: ...


def provider_base_url(provider: str) -> str:
    base_url = PROVIDER_BASE_URLS.get(provider.strip().lower())
    if base_url is None:
        raise UnsupportedProviderError(provider)
    return base_url


def _first_choice_content(payload: object) -> str | None:
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None

    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, str) or not content.strip():
        return None
    return content.strip()


class CompletionClient:
    """Chat-completion adapter over the providers' OpenAI-compatible endpoints.

    One request per call, no retries.
    """

    def __init__(self, *, timeout_seconds: float = 60.0) -> None:
        self._timeout_seconds = timeout_seconds

    def complete(self, messages: PromptMessages, config: LLMConfig) -> str:
        base_url = provider_base_url(config.provider)

        try:
            response = httpx.post(
                f"{base_url}/chat/completions",
                json={"model": config.model, "messages": messages.as_payload()},
                headers={"Authorization": f"Bearer {config.api_key}"},
                timeout=self._timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise CompletionError(f"Completion request failed: {exc}") from exc
        except ValueError as exc:
            raise CompletionError(f"Invalid completion response body: {exc}") from exc

        content = _first_choice_content(payload)
        if content is None:
            logger.warning(
                "Completion from %s/%s carried no content", config.provider, config.model
            )
            return NO_SUMMARY_FALLBACK
        return content
