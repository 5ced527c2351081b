"""Configuration from environment variables."""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

MIN_CACHE_SECONDS = 5


def absint(raw: Any) -> int:
    """Coerce form input to a non-negative int; blanks and junk become 0."""
    if raw is None or isinstance(raw, bool):
        return 0
    try:
        return abs(int(float(str(raw).strip())))
    except (ValueError, OverflowError):
        return 0


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    currency: str = "USD"
    cache_seconds: int = 60
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    cache_url: str | None = None
    nonce_secret: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    nonce_ttl_seconds: int = Field(default=43200, ge=60)
    date_format: str = "%Y-%m-%d %H:%M"
    log_level: str = "INFO"

    model_config = {
        "env_prefix": "CRYPTOTICKER_",
        "case_sensitive": False,
        "env_file": ".env",
        "extra": "ignore",
    }

    @field_validator("currency", "log_level", mode="before")
    @classmethod
    def _uppercase(cls, value: Any) -> str:
        return str(value or "").strip().upper()

    @field_validator("cache_seconds", mode="before")
    @classmethod
    def _clamp_cache_seconds(cls, value: Any) -> int:
        return max(absint(value), MIN_CACHE_SECONDS)


def validate_settings(form: Mapping[str, Any], base: Settings | None = None) -> Settings:
    """Validate submitted admin form values into a new Settings object.

    Only ``currency`` and ``cache_seconds`` are editable; everything else is
    carried over from ``base`` (or the environment when no base is given).
    """
    overrides = {
        "currency": form.get("currency", ""),
        "cache_seconds": form.get("cache_seconds", 0),
    }
    if base is None:
        return Settings(**overrides)
    return Settings(**{**base.model_dump(), **overrides})


def configure_logging(level: str | int = "INFO") -> None:
    """Install a root logging configuration for scripts and servers."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings for the current process."""
    return Settings()
