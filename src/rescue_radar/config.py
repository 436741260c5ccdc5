"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_table: str = "sos_requests"
    database_url: str = "sqlite:///./rescue_radar.db"
    api_url: str | None = None
    admin_token: str | None = None
    record_ttl_days: int = 7
    poll_interval_seconds: float = 30.0
    seed_demo_data: bool = False
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_supabase(self) -> bool:
        """Return true when Supabase credentials are configured."""
        return bool(self.supabase_url and self.supabase_service_key)


def parse_api_url(raw: str | None) -> str | None:
    """Normalize the remote API base URL; blank means no remote backend."""
    if raw is None:
        return None
    cleaned = raw.strip().rstrip("/")
    return cleaned or None
