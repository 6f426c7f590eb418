"""
Configuration and settings for the showcase backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # Database (Postgres expected; any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None)

    # Firebase Authentication
    firebase_project_id: Optional[str] = Field(default=None)
    firebase_credentials_path: Optional[str] = Field(default=None)

    # Pagination
    default_page_size: int = Field(default=9, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "SHOWCASE_USE_IN_MEMORY_BACKENDS", "use_in_memory_backends"
        ),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
