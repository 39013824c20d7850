"""Process settings, read once from the environment at import time.

Unset DATABASE_URL / REDIS_URL select the in-memory store and in-process
session slots. Bad values fail fast with ValueError so a misconfigured
container never starts serving.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

_APP_ENVS = ("dev", "test", "prod")
_LOG_LEVELS = ("debug", "info", "warning", "error")


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("", "0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


def _parse_int(name: str, default: str, *, minimum: int | None = None) -> int:
    raw = _getenv(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None
    if minimum is not None and value < minimum:
        qualifier = "positive" if minimum == 1 else f">= {minimum}"
        raise ValueError(f"{name} must be {qualifier} (got {value})")
    return value


def _parse_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    value = _getenv(name, default).lower()
    if value not in choices:
        raise ValueError(f"{name} must be {'|'.join(choices)} (got {value!r})")
    return value


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    redis_url: str | None
    access_token_ttl_min: int = 60
    db_pool_size: int = 5
    db_max_overflow: int = 10
    seed_demo_data: bool = False
    cors_origins: tuple[str, ...] = ("http://localhost:5173",)

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def session_ttl_seconds(self) -> int:
        """Session slots live exactly as long as the token that carries them."""
        return self.access_token_ttl_min * 60


def load_settings() -> Settings:
    app_env = _parse_choice("APP_ENV", "dev", _APP_ENVS)
    log_level = _parse_choice("LOG_LEVEL", "info", _LOG_LEVELS)

    # Demo content is seeded into the in-memory store in dev unless disabled.
    seed_default = "true" if app_env == "dev" else "false"

    origins = tuple(
        o.strip()
        for o in _getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
        if o.strip()
    )

    return Settings(  # type: ignore[arg-type]
        app_env=app_env,
        log_level=log_level,
        log_json=_parse_bool("LOG_JSON", _getenv("LOG_JSON", "false")),
        port=_parse_int("PORT", "8000"),
        database_url=_getenv("DATABASE_URL", "") or None,
        redis_url=_getenv("REDIS_URL", "") or None,
        access_token_ttl_min=_parse_int("ACCESS_TOKEN_TTL_MIN", "60", minimum=1),
        db_pool_size=_parse_int("DB_POOL_SIZE", "5", minimum=1),
        db_max_overflow=_parse_int("DB_MAX_OVERFLOW", "10", minimum=0),
        seed_demo_data=_parse_bool(
            "SEED_DEMO_DATA", _getenv("SEED_DEMO_DATA", seed_default)
        ),
        cors_origins=origins,
    )


SETTINGS = load_settings()
