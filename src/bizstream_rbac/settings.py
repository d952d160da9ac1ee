"""Runtime configuration read from ``BIZSTREAM_*`` variables and ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SQLITE_PATH = Path("./data/db/bizstream.sqlite")
DEFAULT_DATABASE_URL = f"sqlite:///{DEFAULT_SQLITE_PATH.as_posix()}"

_PRAGMA_CHOICES: dict[str, tuple[frozenset[str], str]] = {
    "database_sqlite_journal_mode": (
        frozenset({"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"}),
        "WAL",
    ),
    "database_sqlite_synchronous": (
        frozenset({"OFF", "NORMAL", "FULL", "EXTRA"}),
        "NORMAL",
    ),
}


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


class Settings(BaseSettings):
    """Process settings; every field maps to ``BIZSTREAM_<FIELD_NAME>``."""

    model_config = SettingsConfigDict(
        env_prefix="BIZSTREAM_",
        env_file=".env",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "BizStream RBAC"
    logging_level: str = "INFO"

    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False
    database_pool_timeout: int = Field(30, gt=0)
    database_sqlite_journal_mode: str = "WAL"
    database_sqlite_synchronous: str = "NORMAL"
    database_sqlite_busy_timeout_ms: int = Field(30_000, ge=0)

    # Fail startup when the role registry is internally inconsistent.
    rbac_verify_registry: bool = True

    @field_validator("logging_level", mode="before")
    @classmethod
    def _normalise_level(cls, value: Any) -> str:
        return _text(value).upper() or "INFO"

    @field_validator("database_url", mode="before")
    @classmethod
    def _default_blank_url(cls, value: Any) -> str:
        return _text(value) or DEFAULT_DATABASE_URL

    @field_validator("database_sqlite_journal_mode", "database_sqlite_synchronous", mode="before")
    @classmethod
    def _check_pragma(cls, value: Any, info: ValidationInfo) -> str:
        choices, fallback = _PRAGMA_CHOICES[info.field_name]
        mode = _text(value).upper() or fallback
        if mode not in choices:
            env_name = f"BIZSTREAM_{info.field_name.upper()}"
            raise ValueError(f"{env_name} must be one of {', '.join(sorted(choices))}")
        return mode


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def reload_settings() -> Settings:
    """Drop the cached settings and read the environment again."""

    get_settings.cache_clear()
    return get_settings()


__all__ = [
    "DEFAULT_DATABASE_URL",
    "Settings",
    "get_settings",
    "reload_settings",
]
