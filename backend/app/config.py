"""Typed settings configuration - single source of truth."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # External APIs
    google_maps_api_key: str = ""
    directions_base_url: str = "https://maps.googleapis.com/maps/api/directions/json"
    places_base_url: str = (
        "https://maps.googleapis.com/maps/api/place/findplacefromtext/json"
    )
    maps_deeplink_base_url: str = "https://www.google.com/maps/dir/"

    # Narration and provider language
    directions_language: str = "ko"

    # Provider selection ("fixtures" serves recorded responses for local dev)
    routing_provider: Literal["google", "fixtures"] = "google"
    routing_fixtures_path: str = ""

    # Aggregator fan-out
    fanout_cap: int = 8

    # Timeouts (milliseconds)
    routing_timeout_ms: int = 8000

    # Circuit breaker
    circuit_breaker_failures: int = 5
    circuit_breaker_window_sec: int = 60
    circuit_breaker_half_open_sec: int = 30

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
