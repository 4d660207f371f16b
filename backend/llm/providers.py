"""LLM provider abstraction layer.

Supports two backends:
  - OpenAI (gpt-4o-mini by default)
  - Ollama (local)

Both implement the same interface so the chat service doesn't need to know
which backend is active. Privacy guarantee: the guardrails sanitiser runs
*before* any provider sees a prompt, so providers only ever receive redacted
text.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx


OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------

class LLMProvider(ABC):
    """Abstract base class for all LLM providers."""

    @abstractmethod
    async def chat_sync(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Non-streaming chat. Returns the full response as a single string."""
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the current model identifier."""
        ...


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------

class OpenAIProvider(LLMProvider):
    """OpenAI Chat Completions API."""

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 60.0):
        self._api_key = api_key
        self._model = model
        self._timeout = timeout

    @property
    def model_name(self) -> str:
        return self._model

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def chat_sync(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        payload: dict = {
            "model": self._model,
            "messages": messages,
            "stream": False,
        }
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                OPENAI_CHAT_URL,
                headers=self._headers(),
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
            choices = data.get("choices") or []
            if not choices:
                return ""
            return choices[0].get("message", {}).get("content") or ""


# ---------------------------------------------------------------------------
# Ollama (local)
# ---------------------------------------------------------------------------

class OllamaProvider(LLMProvider):
    """Ollama running locally, so no data leaves the machine."""

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "llama3",
        timeout: float = 60.0,
    ):
        self.base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout

    @property
    def model_name(self) -> str:
        return self._model

    async def chat_sync(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        payload: dict = {
            "model": self._model,
            "messages": messages,
            "stream": False,
        }
        options: dict = {}
        if temperature is not None:
            options["temperature"] = temperature
        if max_tokens is not None:
            options["num_predict"] = max_tokens
        if options:
            payload["options"] = options

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                f"{self.base_url}/api/chat",
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
            return data.get("message", {}).get("content", "")


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

def create_provider(
    provider: str,
    model: str | None = None,
    *,
    openai_api_key: str = "",
    openai_model: str = "gpt-4o-mini",
    ollama_base_url: str = "http://localhost:11434",
    ollama_model: str = "llama3",
    timeout: float = 60.0,
) -> LLMProvider:
    """Create an LLM provider instance.

    Parameters
    ----------
    provider : str
        One of "openai", "ollama".
    model : str | None
        Override model ID. If None, uses the default for the provider.
    """
    if provider == "openai":
        if not openai_api_key:
            raise ValueError("OpenAI API key is required")
        return OpenAIProvider(
            api_key=openai_api_key,
            model=model or openai_model,
            timeout=timeout,
        )
    elif provider == "ollama":
        return OllamaProvider(
            base_url=ollama_base_url,
            model=model or ollama_model,
            timeout=timeout,
        )
    else:
        raise ValueError(f"Unknown provider: {provider}")
