"""Application configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = "postgresql://localhost/portfolio_monitor"

    # Redis
    redis_url: str = "redis://localhost:6379/0"

    # OKX API
    okx_api_key: str = ""
    okx_api_secret: str = ""
    okx_api_passphrase: str = ""
    quote_currency: str = "USDT"
    candle_timeframe: str = "1d"

    # Telegram delivery
    telegram_bot_token: str = ""
    authorized_user_id: str = ""
    target_channel_id: str = ""

    # Cycle cadences (seconds)
    balance_interval: float = 30
    alert_interval: float = 60
    hourly_snapshot_interval: float = 3600
    daily_snapshot_interval: float = 86400
    align_snapshots_to_calendar: bool = False

    # Policy
    hourly_retention_hours: int = 48
    default_movement_percent: float = 5.0
    pending_input_ttl: int = 300

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
