"""Application-wide settings for the stats API."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT = 100
# The rolling window is fixed; only the request count is configurable.
RATE_LIMIT_WINDOW_SECONDS = 60


class Settings(BaseSettings):
    """Global application configuration."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # One registered credential per access type
    api_key_monthly: Optional[str] = Field(default=None, env="API_KEY_MONTHLY")
    api_key_daily: Optional[str] = Field(default=None, env="API_KEY_DAILY")
    api_key_country_avg: Optional[str] = Field(
        default=None, env="API_KEY_COUNTRY_AVG"
    )
    rate_limit: int = Field(default=DEFAULT_RATE_LIMIT, env="RATE_LIMIT")

    default_target_lang: str = Field(default="en", env="DEFAULT_TARGET_LANG")
    translation_enabled: bool = Field(default=True, env="TRANSLATION_ENABLED")
    # LibreTranslate-compatible endpoint
    translate_base_url: str = Field(
        default="http://localhost:5000", env="TRANSLATE_BASE_URL"
    )
    translate_api_key: Optional[str] = Field(default=None, env="TRANSLATE_API_KEY")
    translate_source_lang: str = Field(default="auto", env="TRANSLATE_SOURCE_LANG")
    translate_request_timeout: float = Field(
        default=10.0, env="TRANSLATE_REQUEST_TIMEOUT"
    )
    translate_retry_attempts: int = Field(default=0, env="TRANSLATE_RETRY_ATTEMPTS")
    translate_retry_backoff_seconds: float = Field(
        default=0.5, env="TRANSLATE_RETRY_BACKOFF_SECONDS"
    )
    translate_max_concurrency: int = Field(
        default=8, env="TRANSLATE_MAX_CONCURRENCY"
    )

    audit_log_store_path: str = Field(
        default="storage/audit_logs.jsonl", env="AUDIT_LOG_STORE_PATH"
    )

    @field_validator("rate_limit", mode="before")
    @classmethod
    def _coerce_rate_limit(cls, value: Any) -> int:
        if value is None or value == "":
            return DEFAULT_RATE_LIMIT
        try:
            parsed = int(value)
        except (TypeError, ValueError):
            logger.warning(
                "Invalid RATE_LIMIT %r, using default of %s requests per minute",
                value,
                DEFAULT_RATE_LIMIT,
            )
            return DEFAULT_RATE_LIMIT
        if parsed < 0:
            logger.warning(
                "Negative RATE_LIMIT %s, using default of %s requests per minute",
                parsed,
                DEFAULT_RATE_LIMIT,
            )
            return DEFAULT_RATE_LIMIT
        return parsed

    @field_validator("translate_max_concurrency", "translate_retry_attempts")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        return max(0, value)


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["RATE_LIMIT_WINDOW_SECONDS", "Settings", "get_settings"]
