from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from courseflow.models.progress import ProgressRecord
from courseflow.repos.material_repo import InMemoryMaterialCatalog


class ProgressStore(Protocol):
    """Per-(student, course, material) completion facts.

    Both writes are upserts keyed by the triple, so repeating them (or
    racing them) never creates a second record.
    """

    async def touch(
        self, student_id: UUID, course_id: UUID, material_id: UUID, now: int
    ) -> ProgressRecord: ...
    async def mark_complete(
        self, student_id: UUID, course_id: UUID, material_id: UUID, now: int
    ) -> ProgressRecord: ...
    async def count_completed(self, student_id: UUID, course_id: UUID) -> int: ...
    async def list_for_student(
        self, student_id: UUID, course_id: UUID
    ) -> list[ProgressRecord]: ...
    async def delete_for_material(self, material_id: UUID) -> int: ...


_Key = tuple[UUID, UUID, UUID]


class InMemoryProgressStore:
    def __init__(self, catalog: InMemoryMaterialCatalog) -> None:
        self._catalog = catalog
        self._store: dict[_Key, ProgressRecord] = {}

    async def touch(
        self, student_id: UUID, course_id: UUID, material_id: UUID, now: int
    ) -> ProgressRecord:
        key = (student_id, course_id, material_id)
        existing = self._store.get(key)
        if existing is None:
            record = ProgressRecord(
                student_id=student_id,
                course_id=course_id,
                material_id=material_id,
                time_spent=1,
                last_accessed=now,
            )
        else:
            record = replace(
                existing, time_spent=existing.time_spent + 1, last_accessed=now
            )
        self._store[key] = record
        return record

    async def mark_complete(
        self, student_id: UUID, course_id: UUID, material_id: UUID, now: int
    ) -> ProgressRecord:
        key = (student_id, course_id, material_id)
        existing = self._store.get(key)
        if existing is None:
            record = ProgressRecord(
                student_id=student_id,
                course_id=course_id,
                material_id=material_id,
                is_completed=True,
                last_accessed=now,
            )
        else:
            record = replace(existing, is_completed=True, last_accessed=now)
        self._store[key] = record
        return record

    async def count_completed(self, student_id: UUID, course_id: UUID) -> int:
        live = self._catalog.material_ids(course_id)
        return sum(
            1
            for (sid, cid, mid), record in self._store.items()
            if sid == student_id
            and cid == course_id
            and record.is_completed
            and mid in live
        )

    async def list_for_student(
        self, student_id: UUID, course_id: UUID
    ) -> list[ProgressRecord]:
        return [
            record
            for (sid, cid, _), record in self._store.items()
            if sid == student_id and cid == course_id
        ]

    async def delete_for_material(self, material_id: UUID) -> int:
        doomed = [key for key in self._store if key[2] == material_id]
        for key in doomed:
            del self._store[key]
        return len(doomed)
