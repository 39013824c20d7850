"""PostgreSQL implementations of AssignmentRepo and SubmissionRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from courseflow.db.tables import AssignmentRow, AssignmentSubmissionRow
from courseflow.models.assignment import (
    GRADED,
    SUBMITTED,
    Assignment,
    AssignmentSubmission,
)
from courseflow.services.errors import ConflictError

_submissions = AssignmentSubmissionRow.__table__


class PgAssignmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, assignment_id: UUID) -> Assignment | None:
        row = await self._session.get(AssignmentRow, assignment_id)
        return None if row is None else _row_to_assignment(row)

    async def add(self, assignment: Assignment) -> None:
        self._session.add(
            AssignmentRow(
                id=assignment.id,
                course_id=assignment.course_id,
                title=assignment.title,
                max_score=assignment.max_score,
                created_by=assignment.created_by,
                due_date=assignment.due_date,
            )
        )
        await self._session.flush()

    async def list_by_course(self, course_id: UUID) -> list[Assignment]:
        stmt = (
            select(AssignmentRow)
            .where(AssignmentRow.course_id == course_id)
            .order_by(AssignmentRow.title)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_assignment(r) for r in rows]


class PgSubmissionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, submission_id: UUID) -> AssignmentSubmission | None:
        stmt = select(_submissions).where(_submissions.c.id == submission_id)
        row = (await self._session.execute(stmt)).one_or_none()
        return None if row is None else _row_to_submission(row)

    async def find(
        self, assignment_id: UUID, student_id: UUID
    ) -> AssignmentSubmission | None:
        stmt = select(_submissions).where(
            _submissions.c.assignment_id == assignment_id,
            _submissions.c.student_id == student_id,
        )
        row = (await self._session.execute(stmt)).one_or_none()
        return None if row is None else _row_to_submission(row)

    async def add(self, submission: AssignmentSubmission) -> None:
        row = AssignmentSubmissionRow(
            id=submission.id,
            assignment_id=submission.assignment_id,
            student_id=submission.student_id,
            content=submission.content,
            file_url=submission.file_url,
            status=submission.status,
            submitted_at=submission.submitted_at,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError:
            # Unique (assignment_id, student_id) lost a race.
            raise ConflictError(
                "You have already submitted this assignment"
            ) from None

    async def mark_graded(
        self,
        submission_id: UUID,
        *,
        score: int,
        feedback: str | None,
        graded_at: int,
    ) -> AssignmentSubmission | None:
        stmt = (
            update(_submissions)
            .where(
                _submissions.c.id == submission_id,
                _submissions.c.status == SUBMITTED,
            )
            .values(status=GRADED, score=score, feedback=feedback, graded_at=graded_at)
            .returning(_submissions)
        )
        row = (await self._session.execute(stmt)).one_or_none()
        return None if row is None else _row_to_submission(row)

    async def list_for_student(
        self, student_id: UUID, course_id: UUID
    ) -> list[AssignmentSubmission]:
        stmt = (
            select(_submissions)
            .join(AssignmentRow, AssignmentRow.id == _submissions.c.assignment_id)
            .where(
                _submissions.c.student_id == student_id,
                AssignmentRow.course_id == course_id,
            )
        )
        rows = (await self._session.execute(stmt)).all()
        return [_row_to_submission(r) for r in rows]

    async def count_for_student(self, student_id: UUID, course_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(_submissions)
            .join(AssignmentRow, AssignmentRow.id == _submissions.c.assignment_id)
            .where(
                _submissions.c.student_id == student_id,
                AssignmentRow.course_id == course_id,
            )
        )
        return int((await self._session.execute(stmt)).scalar_one())


def _row_to_assignment(row: AssignmentRow) -> Assignment:
    return Assignment(
        id=row.id,
        course_id=row.course_id,
        title=row.title,
        max_score=row.max_score,
        created_by=row.created_by,
        due_date=row.due_date,
    )


def _row_to_submission(row) -> AssignmentSubmission:
    return AssignmentSubmission(
        id=row.id,
        assignment_id=row.assignment_id,
        student_id=row.student_id,
        submitted_at=row.submitted_at,
        content=row.content,
        file_url=row.file_url,
        status=row.status,
        score=row.score,
        feedback=row.feedback,
        graded_at=row.graded_at,
    )
