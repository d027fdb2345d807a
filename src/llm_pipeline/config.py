"""
Configuration settings for the LLM pipeline layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from llm_pipeline.models.enums import Role


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "LLM Pipeline"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Provider Selection ===
    PROVIDER: Literal["openai", "ollama"] = "openai"
    FALLBACK_MODELS: list[str] = []  # Tried in order after the primary model, e.g. ["gpt-4.1-mini"]

    # === OpenAI-compatible API ===
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: str = "https://api.openai.com/v1/chat/completions"
    OPENAI_MODEL: str = "gpt-4.1"

    # === Ollama ===
    OLLAMA_BASE_URL: str = "http://ollama:11434"
    OLLAMA_MODEL: str = "qwen2.5:7b"

    # === Resilience ===
    MODEL_TIMEOUT_SECONDS: float = 60.0  # Per attempt
    MAX_RETRIES: int = 2  # Attempts = MAX_RETRIES + 1
    RETRY_DELAY_SECONDS: float = 1.0  # Fixed sleep between attempts, no jitter
    MAX_CONCURRENT_CALLS: int = 8  # Shared across every model built from these settings
    RATE_LIMIT_MAX_CALLS: Optional[int] = None  # Calls per RATE_LIMIT_PERIOD_SECONDS, unset disables
    RATE_LIMIT_PERIOD_SECONDS: float = 60.0

    # === Response Cache ===
    CACHE_BACKEND: Literal["none", "memory", "file", "sql", "redis"] = "none"
    CACHE_SALT: str = ""  # Empty means "use the primary model name"
    CACHE_FILE_PATH: str = ".cache/model_cache.json"
    CACHE_SQL_PATH: str = ".cache/model_cache.db"
    CACHE_TTL_SECONDS: Optional[int] = None  # Redis only, None keeps entries forever

    # === Redis ===
    REDIS_URL: str = "redis://redis:6379/0"
    REDIS_MAX_CONNECTIONS: int = 50

    # === Pipelines ===
    PIPELINE_MAX_RETRIES: int = 2  # Feedback rounds after the first invalid response
    FEEDBACK_ROLE: Role = Role.USER

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True
    METRICS_PORT: Optional[int] = None  # Serve /metrics on this port when enabled

    @property
    def primary_model(self) -> str:
        """Name of the primary model for the configured provider."""
        if self.PROVIDER == "ollama":
            return self.OLLAMA_MODEL
        return self.OPENAI_MODEL


@lru_cache()
def get_settings() -> Settings:
    """
    Get settings singleton.

    Returns:
        Settings instance
    """
    return Settings()
