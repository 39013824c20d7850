"""Storage for each student's single active session token.

SINGLE-SESSION RULE
-------------------
A student account may be signed in on one device at a time. Every login
writes a fresh random token into the account's slot, overwriting whatever
was there. Access tokens carry the session token they were issued with
(the ``sid`` claim), and the session gate compares the two on every
request. Logging in elsewhere therefore invalidates every older
credential at once, without tracking the credentials themselves.

The slot expires together with the access token it was issued for, so an
abandoned session cleans itself up.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable
from uuid import UUID

from courseflow.db.redis import redis_pool


@runtime_checkable
class SessionSlotStore(Protocol):
    async def put(self, user_id: UUID, token: str, ttl_seconds: int) -> None:
        """Replace the account's active session token."""
        ...

    async def get(self, user_id: UUID) -> str | None:
        """Return the active session token, or None if there is none."""
        ...

    async def clear(self, user_id: UUID) -> None: ...


class InMemorySessionSlots:
    """Per-process slots for tests and local dev (no Redis needed)."""

    def __init__(self) -> None:
        # user_id -> (token, expires_at)
        self._slots: dict[UUID, tuple[str, float]] = {}

    async def put(self, user_id: UUID, token: str, ttl_seconds: int) -> None:
        self._slots[user_id] = (token, time.time() + ttl_seconds)

    async def get(self, user_id: UUID) -> str | None:
        entry = self._slots.get(user_id)
        if entry is None:
            return None
        token, expires_at = entry
        if expires_at < time.time():
            del self._slots[user_id]
            return None
        return token

    async def clear(self, user_id: UUID) -> None:
        self._slots.pop(user_id, None)


class RedisSessionSlots:
    """Redis-backed slots, shared across API instances."""

    _PREFIX = "session:slot:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def put(self, user_id: UUID, token: str, ttl_seconds: int) -> None:
        # SETEX replaces the value and the TTL atomically.
        await self._redis.setex(f"{self._PREFIX}{user_id}", ttl_seconds, token)

    async def get(self, user_id: UUID) -> str | None:
        return await self._redis.get(f"{self._PREFIX}{user_id}")

    async def clear(self, user_id: UUID) -> None:
        await self._redis.delete(f"{self._PREFIX}{user_id}")


if redis_pool is not None:
    session_slots: SessionSlotStore = RedisSessionSlots(redis_pool)
else:
    session_slots = InMemorySessionSlots()
