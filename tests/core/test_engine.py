from __future__ import annotations

import asyncio

import pytest

from courseflow.core.config import Settings
from courseflow.db import engine as engine_module


def _settings(database_url: str | None) -> Settings:
    return Settings(  # type: ignore[arg-type]
        app_env="test",
        log_level="info",
        log_json=False,
        port=8000,
        database_url=database_url,
        redis_url=None,
        db_pool_size=3,
        db_max_overflow=1,
    )


def test_no_engine_without_database_url() -> None:
    assert engine_module.build_engine(_settings(None)) is None


def test_engine_uses_pool_settings() -> None:
    eng = engine_module.build_engine(
        _settings("postgresql+asyncpg://app:secret@db/courseflow")
    )
    assert eng is not None
    assert eng.pool.size() == 3
    assert "secret" not in eng.url.render_as_string(hide_password=True)


def test_ping_requires_configured_database(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(engine_module, "engine", None)
    with pytest.raises(RuntimeError, match="DATABASE_URL is not configured"):
        asyncio.run(engine_module.ping_database())
