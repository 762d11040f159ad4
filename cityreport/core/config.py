"""
CityReport - Configuration Management
Centralized configuration using pydantic-settings.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"

    # Backend
    api_url: str = "http://localhost:3000"
    submission_timeout_seconds: float = 60.0

    # Geocoding provider (OpenCage compatible)
    geocoding_url: str = "https://api.opencagedata.com/geocode/v1/json"
    geocoding_api_key: Optional[str] = None
    geocoding_timeout_seconds: float = 10.0

    # Address search
    search_debounce_seconds: float = 0.3
    current_location_label: str = "Ma position"
    unknown_road_label: str = "Route inconnue"
    current_location_wait_seconds: float = 5.0

    # Submission
    preparing_delay_seconds: float = 1.0
    finalizing_delay_seconds: float = 0.5
    max_photos: int = 7

    # Authentication
    auth_token: Optional[str] = None
    auth_token_path: Optional[str] = None


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
