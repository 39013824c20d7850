from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from courseflow.models.assignment import (
    GRADED,
    SUBMITTED,
    Assignment,
    AssignmentSubmission,
)
from courseflow.services.errors import ConflictError


class AssignmentRepo(Protocol):
    async def get(self, assignment_id: UUID) -> Assignment | None: ...
    async def add(self, assignment: Assignment) -> None: ...
    async def list_by_course(self, course_id: UUID) -> list[Assignment]: ...


class SubmissionRepo(Protocol):
    async def get(self, submission_id: UUID) -> AssignmentSubmission | None: ...
    async def find(
        self, assignment_id: UUID, student_id: UUID
    ) -> AssignmentSubmission | None: ...
    async def add(self, submission: AssignmentSubmission) -> None: ...
    async def mark_graded(
        self,
        submission_id: UUID,
        *,
        score: int,
        feedback: str | None,
        graded_at: int,
    ) -> AssignmentSubmission | None: ...
    async def list_for_student(
        self, student_id: UUID, course_id: UUID
    ) -> list[AssignmentSubmission]: ...
    async def count_for_student(self, student_id: UUID, course_id: UUID) -> int: ...


class InMemoryAssignmentRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Assignment] = {}

    async def get(self, assignment_id: UUID) -> Assignment | None:
        return self._by_id.get(assignment_id)

    async def add(self, assignment: Assignment) -> None:
        self._by_id[assignment.id] = assignment

    async def list_by_course(self, course_id: UUID) -> list[Assignment]:
        return [a for a in self._by_id.values() if a.course_id == course_id]


class InMemorySubmissionRepo:
    def __init__(self, assignments: InMemoryAssignmentRepo) -> None:
        self._assignments = assignments
        self._by_id: dict[UUID, AssignmentSubmission] = {}
        self._by_pair: dict[tuple[UUID, UUID], UUID] = {}

    async def get(self, submission_id: UUID) -> AssignmentSubmission | None:
        return self._by_id.get(submission_id)

    async def find(
        self, assignment_id: UUID, student_id: UUID
    ) -> AssignmentSubmission | None:
        submission_id = self._by_pair.get((assignment_id, student_id))
        return None if submission_id is None else self._by_id[submission_id]

    async def add(self, submission: AssignmentSubmission) -> None:
        pair = (submission.assignment_id, submission.student_id)
        if pair in self._by_pair:
            raise ConflictError("You have already submitted this assignment")
        self._by_pair[pair] = submission.id
        self._by_id[submission.id] = submission

    async def mark_graded(
        self,
        submission_id: UUID,
        *,
        score: int,
        feedback: str | None,
        graded_at: int,
    ) -> AssignmentSubmission | None:
        """Flip SUBMITTED -> GRADED. Returns None if not in SUBMITTED state."""
        existing = self._by_id.get(submission_id)
        if existing is None or existing.status != SUBMITTED:
            return None
        graded = replace(
            existing,
            status=GRADED,
            score=score,
            feedback=feedback,
            graded_at=graded_at,
        )
        self._by_id[submission_id] = graded
        return graded

    async def list_for_student(
        self, student_id: UUID, course_id: UUID
    ) -> list[AssignmentSubmission]:
        course_assignments = {
            a.id for a in await self._assignments.list_by_course(course_id)
        }
        return [
            s
            for s in self._by_id.values()
            if s.student_id == student_id and s.assignment_id in course_assignments
        ]

    async def count_for_student(self, student_id: UUID, course_id: UUID) -> int:
        return len(await self.list_for_student(student_id, course_id))
