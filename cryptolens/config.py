"""
Cryptolens Configuration Management

Pydantic Settings: loads from the environment (prefix ``CRYPTOLENS_``) and an
optional ``.env`` file. Per-call engine parameters live on the config models
in :mod:`cryptolens.models`; this module only holds process-wide settings.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CRYPTOLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Logging ──
    log_level: str = "INFO"
    log_json: bool = False

    # ── Market Data ──
    binance_base_url: str = "https://api.binance.com/api/v3"
    http_timeout: float = 10.0
    kline_limit: int = 500
    default_interval: str = "1h"


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance, created once and reused everywhere."""
    return Settings()
