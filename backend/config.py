from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    log_level: str = "INFO"

    # CORS: comma-separated origins allowed to access the API
    cors_origins: str = "http://localhost:3000"

    # Guardrails
    guardrails_log_level: str = "WARNING"
    guardrails_strict_mode: bool = False
    guardrails_max_critical_violations: int = 0
    guardrails_max_high_violations: int = 3
    guardrails_max_content_reduction_percent: float = 50.0

    # LLM Provider settings
    default_provider: str = "openai"     # "openai", "ollama"
    llm_timeout_seconds: float = 60.0

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # Ollama (local)
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "llama3"

    # Meeting chat
    chat_temperature: float = 0.7
    chat_max_tokens: int = 1000
    chat_history_limit: int = 10        # most recent messages forwarded
    chat_max_question_chars: int = 10_000
    chat_max_transcript_chars: int = 200_000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
