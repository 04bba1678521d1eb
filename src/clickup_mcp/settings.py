"""
ClickUp MCP settings.

All values are read from environment variables prefixed with ``CLICKUP_``
(or a local ``.env`` file).
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from clickup_mcp.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_AUTHORIZE_URL,
    DEFAULT_TOKEN_URL,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CLICKUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # OAuth application
    client_id: str = ""
    client_secret: str = ""
    cookie_secret: str = ""

    # Credential used by the MCP tools
    access_token: str = ""

    # Upstream
    api_base_url: str = DEFAULT_API_BASE_URL
    authorize_url: str = DEFAULT_AUTHORIZE_URL
    token_url: str = DEFAULT_TOKEN_URL
    timeout: float = 30.0

    # Aggregation
    max_concurrency: int = Field(default=4, ge=1, le=32)
    display_timezone: str = "Asia/Tokyo"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
