"""Redis connection management.

Mirrors engine.py for PostgreSQL: when REDIS_URL is configured a shared
connection pool is created at import time; when it is unset (local dev,
tests) ``redis_pool`` is None and every consumer falls back to its
in-memory implementation.

The only Redis-backed feature is the single-session slot store
(services/session_slots.py). Slots are checked on every student request,
expire on their own via TTL, and must be visible to every API instance,
which is exactly the shape of data Redis is good at.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from courseflow.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=20,
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis():
    """Verify the pool on startup and close it on shutdown."""
    if redis_pool is None:
        logger.info("No REDIS_URL configured; session slots are kept in memory")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]
        logger.info("Redis connected: %s", SETTINGS.redis_url)
    except Exception:
        # Keep serving; /ready reports the outage and slot lookups fail
        # with storage_unavailable until Redis comes back.
        logger.exception("Redis connection failed on startup")

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
