"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Remote PDF API (prefixes every boundary call)
    pdf_api_url: str = "http://127.0.0.1:8000"

    # Write-behind quiet period for field edits (milliseconds)
    update_debounce_ms: int = 400

    # HTTP timeout in seconds; None leaves calls unbounded
    request_timeout_s: float | None = None

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
