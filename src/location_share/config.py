"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str | None = None
    supabase_service_key: str | None = None
    public_base_url: str = "http://localhost:8000/"
    session_ttl_hours: float = 3
    poll_interval_seconds: float = 5.0
    nominatim_url: str = "https://nominatim.openstreetmap.org/reverse"
    nominatim_user_agent: str = "location-share/0.1"
    geocode_timeout_seconds: float = 10
    geocode_cache_ttl_seconds: int = 86400
    display_timezone: str = "UTC"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_supabase(self) -> bool:
        """Return True when a shared Supabase store is configured."""
        return bool(self.supabase_url and self.supabase_service_key)
