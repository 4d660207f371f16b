"""LLM client factory.

Provides ``get_llm_client()`` which returns the correct provider based on
the requested provider/model or the global default from settings.
"""

from __future__ import annotations

from config import get_settings
from llm.providers import LLMProvider, create_provider


def get_llm_client(
    provider: str | None = None,
    model: str | None = None,
) -> LLMProvider:
    """Create an LLM provider instance.

    Parameters
    ----------
    provider : str | None
        One of "openai", "ollama". Defaults to settings.default_provider.
    model : str | None
        Model ID override. If None, uses the default for the provider.
    """
    settings = get_settings()
    provider = provider or settings.default_provider

    return create_provider(
        provider=provider,
        model=model,
        openai_api_key=settings.openai_api_key,
        openai_model=settings.openai_model,
        ollama_base_url=settings.ollama_base_url,
        ollama_model=settings.ollama_model,
        timeout=settings.llm_timeout_seconds,
    )
