import logging

from fastapi import HTTPException

from llm.client import get_llm_client
from llm.providers import LLMProvider

logger = logging.getLogger(__name__)


def get_llm_provider() -> LLMProvider:
    try:
        return get_llm_client()
    except ValueError as exc:
        logger.error("LLM provider is not configured: %s", exc)
        raise HTTPException(status_code=503, detail="AI service is not configured") from exc
