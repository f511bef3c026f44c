"""
Configuration and settings for the timetable board.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PROFILE_URL = "https://www.roblox.com/pl/users/818949423/profile"


class Settings(BaseSettings):
    """Environment-backed settings shared by the page and the JSON API."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Structured store (any SQLAlchemy URL; Postgres expected in production)
    database_url: Optional[str] = Field(default=None)
    database_key: Optional[str] = Field(default=None)

    # Local key-value store used when the structured store is unavailable
    local_store_path: str = Field(default="data/local_store.json")

    # Shared secret that unlocks editing
    admin_passphrase: str = Field(default="bombakapitana")

    # Presentation
    display_timezone: str = Field(default="Europe/Warsaw")
    header_image: Optional[str] = Field(default=None)
    profile_url: str = Field(default=DEFAULT_PROFILE_URL)

    log_level: str = Field(default="INFO")

    @property
    def structured_store_configured(self) -> bool:
        return bool(self.database_url) and bool(self.database_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )
