"""Per-key serialization scopes for read-then-write sequences.

A recomputation reads two counts and writes a percentage. Two of them
running interleaved for the same (student, course) could let the one that
read the stale count write last. ``KeyedLock`` gives each key its own
``asyncio.Lock`` for the duration of the critical section.

Entries are dropped as soon as nobody holds or waits on them, so the map
stays small and no lock outlives the event loop that created it.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class KeyedLock:
    def __init__(self) -> None:
        self._entries: dict[Hashable, _Entry] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _Entry()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)


# Process-wide scopes shared by every request.
enrollment_locks = KeyedLock()  # key: (student_id, course_id)
submission_locks = KeyedLock()  # key: (assignment_id, student_id)
