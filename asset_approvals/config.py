from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Asset Approvals"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "postgresql+asyncpg://asset_approvals:asset_approvals@db:5432/asset_approvals"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]
    log_level: str = "INFO"

    # Ordered lowest to highest. A role's level is its index in this list.
    roles: list[str] = ["employee", "supervisor", "admin", "super_admin"]
    lowest_role_can_approve: bool = False

    notification_webhook_url: str | None = None
    notification_timeout_seconds: float = 5.0
    site_url: str = "http://localhost:3000"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
