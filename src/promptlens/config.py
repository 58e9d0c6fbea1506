"""Runtime configuration for promptlens.

Values are read from the environment with the ``PROMPTLENS_`` prefix
(e.g. ``PROMPTLENS_DEBOUNCE_SECONDS=1.5``) or from a ``.env`` file.
"""

import logging

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Analysis settings."""

    model_config = SettingsConfigDict(
        env_prefix="PROMPTLENS_",
        env_file=".env",
        extra="ignore",
    )

    # Scheduling
    debounce_seconds: float = Field(default=2.0, ge=0)

    # Result cache
    cache_ttl_seconds: float = Field(default=3600.0, gt=0)
    cache_max_entries: int = Field(default=100, ge=1)

    # Semantic analysis
    enable_semantic_analysis: bool = True
    semantic_timeout_seconds: float = Field(default=60.0, gt=0)
    max_composed_size: int = Field(default=100_000, ge=1)
    min_semantic_content_length: int = Field(default=20, ge=0)

    # Token budgeting
    target_model: str = "gpt-4"

    # HTTP completion provider (optional)
    llm_base_url: str = "https://api.openai.com/v1"
    llm_api_key: SecretStr | None = None
    llm_model: str = "gpt-4o-mini"

    log_level: str = "INFO"


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Apply the configured log level to the ``promptlens`` logger tree."""
    logging.getLogger("promptlens").setLevel((level or settings.log_level).upper())
