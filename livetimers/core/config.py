"""Environment-driven configuration for the Live Timers service.

Every knob lives on ``Settings`` so that routers, the live channel and the
broadcaster read the same values. Settings are loaded once per process through
``get_settings``; tests set environment variables *before* importing the
package to override them.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Live Timers"
    APP_ENV: str = "dev"

    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2] / "data")
    DB_URL: str | None = Field(default=None, validation_alias=AliasChoices("DATABASE_URL", "DB_URL"))

    # Cookie names match what browser clients already send.
    SESSION_COOKIE_NAME: str = "sessionId"
    TOKEN_COOKIE_NAME: str = "sessionToken"
    COOKIE_SECURE: bool = False
    COOKIE_SAMESITE: str = "lax"

    # Opaque credential size in random bytes, and how many times a colliding
    # credential pair is regenerated before giving up.
    CREDENTIAL_BYTES: int = 16
    CREDENTIAL_ATTEMPTS: int = 3
    PASSWORD_HASH_ROUNDS: int = 12

    # Periodic ``active_timers`` push. Zero or less disables the broadcaster.
    TICK_INTERVAL_SECONDS: float = 1.0

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    ALLOWED_ORIGINS: list[str] = Field(default_factory=list)

    @property
    def broadcast_enabled(self) -> bool:
        return self.TICK_INTERVAL_SECONDS > 0

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip() for item in value if str(item).strip()]
        raise TypeError("ALLOWED_ORIGINS must be a comma separated string or list")

    @field_validator("COOKIE_SAMESITE")
    @classmethod
    def check_samesite(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in {"lax", "strict", "none"}:
            raise ValueError("COOKIE_SAMESITE must be one of lax, strict, none")
        return normalized


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    if settings.DB_URL is None:
        settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
        settings.DB_URL = f"sqlite:///{settings.DATA_DIR / 'livetimers.db'}"
    return settings


settings = get_settings()
