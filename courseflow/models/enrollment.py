from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID

EnrollmentStatus = Literal["ACTIVE", "COMPLETED", "DROPPED"]

ACTIVE: EnrollmentStatus = "ACTIVE"
COMPLETED: EnrollmentStatus = "COMPLETED"
DROPPED: EnrollmentStatus = "DROPPED"


@dataclass(frozen=True, slots=True)
class Enrollment:
    """Links a student to a course and carries the derived progress state.

    ``progress_percentage`` and the COMPLETED status are only ever written
    by the enrollment state machine after a recalculation.
    """

    student_id: UUID
    course_id: UUID
    enrolled_at: int
    status: EnrollmentStatus = ACTIVE
    progress_percentage: int = 0
    completed_at: int | None = None

    @property
    def is_dropped(self) -> bool:
        return self.status == DROPPED

    @staticmethod
    def new(*, student_id: UUID, course_id: UUID, enrolled_at: int) -> Enrollment:
        return Enrollment(
            student_id=student_id,
            course_id=course_id,
            enrolled_at=enrolled_at,
        )
