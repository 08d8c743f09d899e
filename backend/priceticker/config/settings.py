from __future__ import annotations

import re
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CURRENCY = "USD"
MIN_CACHE_TTL_SECONDS = 1

_NON_LETTERS_RE = re.compile(r"[^A-Za-z]")


def sanitize_currency(value: str | None) -> str:
    cleaned = _NON_LETTERS_RE.sub("", value or "").upper()
    return cleaned or DEFAULT_CURRENCY


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PRICETICKER_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = ""
    default_ccy: str = DEFAULT_CURRENCY
    cache_ttl: int = 60
    request_timeout_seconds: float = 8.0

    cache_backend: Literal["memory", "redis"] = "memory"
    cache_key_prefix: str = "priceticker"
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias=AliasChoices("REDIS_URL", "PRICETICKER_REDIS_URL", "redis_url"),
    )

    log_level: str = "INFO"

    @field_validator("base_url", mode="before")
    @classmethod
    def _strip_base_url(cls, value: object) -> str:
        return str(value or "").strip().rstrip("/")

    @field_validator("default_ccy", mode="before")
    @classmethod
    def _sanitize_default_ccy(cls, value: object) -> str:
        return sanitize_currency(str(value) if value is not None else None)

    @field_validator("cache_ttl", mode="after")
    @classmethod
    def _clamp_cache_ttl(cls, value: int) -> int:
        return max(MIN_CACHE_TTL_SECONDS, value)


settings = Settings()
