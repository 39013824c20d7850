"""PostgreSQL engine for the progress store.

``engine`` and ``async_session_factory`` are None when DATABASE_URL is
unset; ``get_store`` then hands out the in-memory store instead. Request
sessions and their transaction boundaries live in api/dependencies.py.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from courseflow.core.config import SETTINGS, Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the rows in db/tables.py."""


def build_engine(settings: Settings) -> AsyncEngine | None:
    if not settings.database_url:
        return None
    return create_async_engine(
        settings.database_url,
        echo=settings.is_dev,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        # Recalculations run right after idle periods; drop dead connections.
        pool_pre_ping=True,
    )


engine = build_engine(SETTINGS)
async_session_factory = (
    async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    if engine is not None
    else None
)


async def ping_database() -> None:
    """Round-trip ``SELECT 1``; raises the driver error when unreachable."""
    if engine is None:
        raise RuntimeError("DATABASE_URL is not configured")
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


@asynccontextmanager
async def lifespan_db():
    if engine is None:
        logger.info("No DATABASE_URL configured, progress is kept in memory")
        yield
        return

    safe_url = engine.url.render_as_string(hide_password=True)
    try:
        await ping_database()
        logger.info("Database connected: %s", safe_url)
    except Exception:
        logger.exception("Database connection failed on startup: %s", safe_url)

    yield

    await engine.dispose()
    logger.info("Database engine disposed")
