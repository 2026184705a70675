"""
Configuration and settings for the meal map API.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Direct Postgres connection to the managed database (SQLAlchemy URL)
    database_url: Optional[str] = Field(default=None)

    # Managed backend REST access
    supabase_url: Optional[str] = Field(default=None)
    supabase_key: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="MEALMAP_USE_IN_MEMORY_BACKENDS"
    )

    # Reverse geocoding
    nominatim_base_url: str = Field(
        default="https://nominatim.openstreetmap.org/reverse"
    )
    nominatim_user_agent: str = Field(default="crowdsourced-meal-map/0.1")
    geocode_timeout_seconds: float = Field(default=10.0)

    default_locale: str = Field(default="en")
    # Opening hours are wall-clock times in this zone
    timezone: str = Field(default="Europe/Berlin")
    nearby_default_radius_m: float = Field(default=5000.0)
    availability_history_limit: int = Field(default=10)

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
