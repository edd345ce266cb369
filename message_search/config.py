"""Configuration for the message search engine."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Message search configuration.

    All settings can be overridden via environment variables prefixed with
    ``MESSAGE_SEARCH_`` (e.g. ``MESSAGE_SEARCH_MAX_INDEX_SIZE=5000``).
    """

    # Index limits
    MAX_INDEX_SIZE: int = Field(default=10000, ge=1)

    # Result cache
    ENABLE_CACHE: bool = Field(default=True)
    CACHE_TIMEOUT_SECONDS: float = Field(default=300.0, gt=0)
    CACHE_CLEANUP_INTERVAL_SECONDS: float = Field(default=60.0, gt=0)
    CACHE_MAX_ENTRIES: int = Field(default=10000, ge=1)

    # Matching
    SEARCH_THRESHOLD: float = Field(default=0.3, ge=0.0, le=1.0)
    SUGGESTION_THRESHOLD: float = Field(default=0.6, ge=0.0, le=1.0)

    # Highlighting
    ENABLE_HIGHLIGHTING: bool = Field(default=True)
    HIGHLIGHT_CONTEXT_CHARS: int = Field(default=50, ge=0)

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    LOG_JSON: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_prefix="MESSAGE_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
