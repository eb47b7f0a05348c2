"""Configuration settings for the Tusky MCP server.

All settings are read from the environment (or a ``.env`` file) with the
``TUSKY_`` prefix, e.g. ``TUSKY_API_URL`` and ``TUSKY_API_KEY``.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Tusky MCP settings from environment."""

    # Tusky API
    api_url: str = "https://api.tusky.io/v1"
    api_key: Optional[str] = None  # static fallback credential before authentication
    request_timeout: float = 10.0  # seconds, per backend call

    # Authentication
    nonce_history_size: int = 1024

    # Logging
    log_level: str = "INFO"

    class Config:
        env_prefix = "TUSKY_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
