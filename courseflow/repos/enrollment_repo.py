from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from courseflow.models.enrollment import Enrollment, EnrollmentStatus
from courseflow.services.errors import ConflictError


class EnrollmentRepo(Protocol):
    async def find(self, student_id: UUID, course_id: UUID) -> Enrollment | None: ...
    async def find_for_update(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None: ...
    async def create(self, enrollment: Enrollment) -> None: ...
    async def update_status_and_percentage(
        self,
        student_id: UUID,
        course_id: UUID,
        *,
        status: EnrollmentStatus,
        progress_percentage: int,
        completed_at: int | None,
    ) -> Enrollment | None: ...
    async def list_by_course(self, course_id: UUID) -> list[Enrollment]: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._store: dict[tuple[UUID, UUID], Enrollment] = {}

    async def find(self, student_id: UUID, course_id: UUID) -> Enrollment | None:
        return self._store.get((student_id, course_id))

    async def find_for_update(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None:
        # Row locking is the caller's keyed lock when there is no database.
        return self._store.get((student_id, course_id))

    async def create(self, enrollment: Enrollment) -> None:
        key = (enrollment.student_id, enrollment.course_id)
        if key in self._store:
            raise ConflictError("Already enrolled in this course")
        self._store[key] = enrollment

    async def update_status_and_percentage(
        self,
        student_id: UUID,
        course_id: UUID,
        *,
        status: EnrollmentStatus,
        progress_percentage: int,
        completed_at: int | None,
    ) -> Enrollment | None:
        key = (student_id, course_id)
        existing = self._store.get(key)
        if existing is None:
            return None
        updated = replace(
            existing,
            status=status,
            progress_percentage=progress_percentage,
            completed_at=completed_at,
        )
        self._store[key] = updated
        return updated

    async def list_by_course(self, course_id: UUID) -> list[Enrollment]:
        return [e for (_, cid), e in self._store.items() if cid == course_id]
