"""Assignment submission and grading.

A submission counts toward the student's completed items, so a successful
submit recomputes the enrollment. Grading changes no completion fact and
never triggers a recomputation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from courseflow.core.metrics import SUBMISSIONS
from courseflow.models.assignment import GRADED, AssignmentSubmission
from courseflow.models.enrollment import Enrollment
from courseflow.models.principal import Principal
from courseflow.models.progress import ProgressStats
from courseflow.repos.store import Store
from courseflow.services.clock import Clock, utc_now
from courseflow.services.enrollment_state import EnrollmentStateMachine
from courseflow.services.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
)
from courseflow.services.locks import KeyedLock, submission_locks

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    submission: AssignmentSubmission
    enrollment: Enrollment
    stats: ProgressStats


class AssignmentGradingWorkflow:
    def __init__(
        self,
        store: Store,
        state: EnrollmentStateMachine | None = None,
        *,
        clock: Clock = utc_now,
        locks: KeyedLock = submission_locks,
    ) -> None:
        self._store = store
        self._state = state or EnrollmentStateMachine(store, clock=clock)
        self._clock = clock
        self._locks = locks

    async def submit(
        self,
        student_id: UUID,
        assignment_id: UUID,
        *,
        content: str = "",
        file_url: str | None = None,
    ) -> SubmissionResult:
        assignment = await self._store.assignments.get(assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment not found")

        enrollment = await self._store.enrollments.find(
            student_id, assignment.course_id
        )
        if enrollment is None or enrollment.is_dropped:
            SUBMISSIONS.labels("forbidden").inc()
            raise ForbiddenError("You must be enrolled in this course to submit")

        async with self._locks.hold((assignment_id, student_id)):
            if await self._store.submissions.find(assignment_id, student_id):
                SUBMISSIONS.labels("duplicate").inc()
                raise ConflictError("You have already submitted this assignment")

            now = self._clock()
            if assignment.due_date is not None and now > assignment.due_date:
                SUBMISSIONS.labels("late").inc()
                raise ValidationFailedError("Assignment due date has passed")

            submission = AssignmentSubmission.new(
                assignment_id=assignment_id,
                student_id=student_id,
                submitted_at=now,
                content=content,
                file_url=file_url,
            )
            await self._store.submissions.add(submission)

        SUBMISSIONS.labels("accepted").inc()
        logger.info(
            "Submission accepted assignment=%s student=%s",
            assignment_id,
            student_id,
        )

        updated, stats = await self._state.refresh(
            student_id, assignment.course_id, trigger="submission"
        )
        return SubmissionResult(submission=submission, enrollment=updated, stats=stats)

    async def grade(
        self,
        grader: Principal,
        submission_id: UUID,
        *,
        score: int,
        feedback: str | None = None,
    ) -> AssignmentSubmission:
        submission = await self._store.submissions.get(submission_id)
        if submission is None:
            raise NotFoundError("Submission not found")
        assignment = await self._store.assignments.get(submission.assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment not found")

        if not grader.is_admin() and assignment.created_by != grader.user_id:
            logger.warning(
                "Grading denied: user=%s submission=%s", grader.user_id, submission_id
            )
            raise ForbiddenError("Only the assignment creator or an admin can grade")

        if score < 0 or score > assignment.max_score:
            raise ValidationFailedError(
                f"Score must be between 0 and {assignment.max_score}"
            )
        if submission.status == GRADED:
            raise ConflictError("Submission has already been graded")

        graded = await self._store.submissions.mark_graded(
            submission_id,
            score=score,
            feedback=feedback,
            graded_at=self._clock(),
        )
        if graded is None:
            # Lost a race with another grader.
            raise ConflictError("Submission has already been graded")

        logger.info(
            "Submission graded submission=%s score=%d/%d by=%s",
            submission_id,
            score,
            assignment.max_score,
            grader.user_id,
        )
        return graded
