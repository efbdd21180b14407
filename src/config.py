from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Environment
    environment: str = "development"  # "development" or "production"

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/fleet_alerts.db"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    # CORS (comma-separated origins, empty means localhost only)
    cors_origins: str = ""

    # Shared secret for cron / manual trigger endpoints (empty disables the check)
    cron_secret: str = ""

    # Web Push (VAPID)
    vapid_public_key: str = ""
    vapid_private_key: str = ""
    vapid_subject: str = "mailto:admin@enfocar.app"
    push_timeout_seconds: float = 10.0
    push_ttl_seconds: int = 86400
    push_max_workers: int = 10

    # Notifications
    notification_enabled: bool = True
    expiry_dedup_enabled: bool = False

    # Scheduling
    timezone: str = ""  # IANA name, e.g. "America/Bogota"; empty uses server local time
    scheduler_enabled: bool = False

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def sync_database_url(self) -> str:
        return self.database_url.replace("+aiosqlite", "")


@lru_cache
def get_settings() -> Settings:
    return Settings()
