from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID, uuid4

SubmissionStatus = Literal["SUBMITTED", "GRADED"]

SUBMITTED: SubmissionStatus = "SUBMITTED"
GRADED: SubmissionStatus = "GRADED"


@dataclass(frozen=True, slots=True)
class Assignment:
    id: UUID
    course_id: UUID
    title: str
    max_score: int
    created_by: UUID
    due_date: int | None = None

    @staticmethod
    def new(
        *,
        course_id: UUID,
        title: str,
        max_score: int,
        created_by: UUID,
        due_date: int | None = None,
    ) -> Assignment:
        return Assignment(
            id=uuid4(),
            course_id=course_id,
            title=title,
            max_score=max_score,
            created_by=created_by,
            due_date=due_date,
        )


@dataclass(frozen=True, slots=True)
class AssignmentSubmission:
    """A student's one-time response to an assignment.

    At most one per (assignment_id, student_id). Moves SUBMITTED -> GRADED
    and never back.
    """

    id: UUID
    assignment_id: UUID
    student_id: UUID
    submitted_at: int
    content: str = ""
    file_url: str | None = None
    status: SubmissionStatus = SUBMITTED
    score: int | None = None
    feedback: str | None = None
    graded_at: int | None = None

    @staticmethod
    def new(
        *,
        assignment_id: UUID,
        student_id: UUID,
        submitted_at: int,
        content: str = "",
        file_url: str | None = None,
    ) -> AssignmentSubmission:
        return AssignmentSubmission(
            id=uuid4(),
            assignment_id=assignment_id,
            student_id=student_id,
            submitted_at=submitted_at,
            content=content,
            file_url=file_url,
        )
