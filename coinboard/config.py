"""Application configuration management."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from coinboard.coingecko import COINGECKO_API_BASE
from coinboard.preferences import DEFAULT_DB_PATH


class Settings(BaseSettings):
    """Runtime configuration loaded from environment or `.env`."""

    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    coingecko_api_base: str = Field(
        default=COINGECKO_API_BASE,
        alias="COINGECKO_API_BASE",
    )
    vs_currency: str = Field(default="usd", alias="VS_CURRENCY")
    top_coins: int = Field(default=50, alias="TOP_COINS", ge=1, le=250)

    refresh_interval_seconds: int = Field(
        default=30, alias="REFRESH_INTERVAL_SECONDS", ge=5, le=3600
    )
    http_timeout_seconds: float = Field(
        default=10.0, alias="HTTP_TIMEOUT_SECONDS", gt=0, le=120
    )
    move_alert_threshold_percent: float = Field(
        default=5.0, alias="MOVE_ALERT_THRESHOLD_PERCENT", gt=0
    )

    preferences_db_path: Path = Field(
        default=DEFAULT_DB_PATH,
        alias="PREFERENCES_DB_PATH",
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Return cached Settings instance, raising a helpful message on failure."""
    try:
        return Settings()
    except ValidationError as exc:
        raise RuntimeError(f"Invalid configuration: {exc}") from exc


__all__ = ["Settings", "load_settings"]
