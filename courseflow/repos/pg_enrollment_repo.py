"""PostgreSQL implementation of EnrollmentRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from courseflow.db.tables import EnrollmentRow
from courseflow.models.enrollment import Enrollment, EnrollmentStatus
from courseflow.services.errors import ConflictError

_enrollments = EnrollmentRow.__table__


class PgEnrollmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find(self, student_id: UUID, course_id: UUID) -> Enrollment | None:
        stmt = select(_enrollments).where(
            _enrollments.c.student_id == student_id,
            _enrollments.c.course_id == course_id,
        )
        row = (await self._session.execute(stmt)).one_or_none()
        return None if row is None else _row_to_enrollment(row)

    async def find_for_update(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None:
        # Row lock held until the request transaction ends; serializes
        # concurrent recomputations across API processes.
        stmt = (
            select(_enrollments)
            .where(
                _enrollments.c.student_id == student_id,
                _enrollments.c.course_id == course_id,
            )
            .with_for_update()
        )
        row = (await self._session.execute(stmt)).one_or_none()
        return None if row is None else _row_to_enrollment(row)

    async def create(self, enrollment: Enrollment) -> None:
        row = EnrollmentRow(
            student_id=enrollment.student_id,
            course_id=enrollment.course_id,
            status=enrollment.status,
            progress_percentage=enrollment.progress_percentage,
            enrolled_at=enrollment.enrolled_at,
            completed_at=enrollment.completed_at,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError:
            raise ConflictError("Already enrolled in this course") from None

    async def update_status_and_percentage(
        self,
        student_id: UUID,
        course_id: UUID,
        *,
        status: EnrollmentStatus,
        progress_percentage: int,
        completed_at: int | None,
    ) -> Enrollment | None:
        stmt = (
            update(_enrollments)
            .where(
                _enrollments.c.student_id == student_id,
                _enrollments.c.course_id == course_id,
            )
            .values(
                status=status,
                progress_percentage=progress_percentage,
                completed_at=completed_at,
            )
            .returning(_enrollments)
        )
        row = (await self._session.execute(stmt)).one_or_none()
        return None if row is None else _row_to_enrollment(row)

    async def list_by_course(self, course_id: UUID) -> list[Enrollment]:
        stmt = select(_enrollments).where(_enrollments.c.course_id == course_id)
        rows = (await self._session.execute(stmt)).all()
        return [_row_to_enrollment(r) for r in rows]


def _row_to_enrollment(row) -> Enrollment:
    return Enrollment(
        student_id=row.student_id,
        course_id=row.course_id,
        enrolled_at=row.enrolled_at,
        status=row.status,
        progress_percentage=row.progress_percentage,
        completed_at=row.completed_at,
    )
