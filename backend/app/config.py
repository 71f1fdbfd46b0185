"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str | None = None

    # Cache
    redis_url: str | None = None

    # UI
    ui_origin: str = "http://localhost:8501"
    backend_url: str = "http://localhost:8000"
    http_timeout_seconds: float = 60.0

    # Generation
    openai_api_key: SecretStr | None = None
    openai_model: str = "gpt-4o-mini"
    generation_temperature: float = 0.7
    generation_max_tokens: int = 1000
    generation_max_words: int = 350

    # Accounts
    signup_credits: int = 3
    auth_token_ttl_hours: int = 24 * 7

    # Rate limiting (requests per minute)
    generations_per_min: int = 5


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
