"""PostgreSQL implementation of ProgressStore.

Writes are ``INSERT ... ON CONFLICT DO UPDATE`` on the composite primary
key, so concurrent first accesses of the same material collapse into a
single row.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from courseflow.db.tables import MaterialRow, ProgressRecordRow
from courseflow.models.progress import ProgressRecord

_progress = ProgressRecordRow.__table__
_KEY = ["student_id", "course_id", "material_id"]


class PgProgressStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def touch(
        self, student_id: UUID, course_id: UUID, material_id: UUID, now: int
    ) -> ProgressRecord:
        stmt = (
            insert(_progress)
            .values(
                student_id=student_id,
                course_id=course_id,
                material_id=material_id,
                is_completed=False,
                time_spent=1,
                last_accessed=now,
            )
            .on_conflict_do_update(
                index_elements=_KEY,
                set_={
                    "time_spent": _progress.c.time_spent + 1,
                    "last_accessed": now,
                },
            )
            .returning(_progress)
        )
        row = (await self._session.execute(stmt)).one()
        return _row_to_record(row)

    async def mark_complete(
        self, student_id: UUID, course_id: UUID, material_id: UUID, now: int
    ) -> ProgressRecord:
        stmt = (
            insert(_progress)
            .values(
                student_id=student_id,
                course_id=course_id,
                material_id=material_id,
                is_completed=True,
                time_spent=0,
                last_accessed=now,
            )
            .on_conflict_do_update(
                index_elements=_KEY,
                set_={"is_completed": True, "last_accessed": now},
            )
            .returning(_progress)
        )
        row = (await self._session.execute(stmt)).one()
        return _row_to_record(row)

    async def count_completed(self, student_id: UUID, course_id: UUID) -> int:
        # Join against the live material set so records of deleted
        # materials can never be counted.
        stmt = (
            select(func.count())
            .select_from(ProgressRecordRow)
            .join(MaterialRow, MaterialRow.id == ProgressRecordRow.material_id)
            .where(
                ProgressRecordRow.student_id == student_id,
                ProgressRecordRow.course_id == course_id,
                ProgressRecordRow.is_completed.is_(True),
                MaterialRow.course_id == course_id,
            )
        )
        return int((await self._session.execute(stmt)).scalar_one())

    async def list_for_student(
        self, student_id: UUID, course_id: UUID
    ) -> list[ProgressRecord]:
        stmt = select(_progress).where(
            _progress.c.student_id == student_id,
            _progress.c.course_id == course_id,
        )
        rows = (await self._session.execute(stmt)).all()
        return [_row_to_record(r) for r in rows]

    async def delete_for_material(self, material_id: UUID) -> int:
        stmt = delete(ProgressRecordRow).where(
            ProgressRecordRow.material_id == material_id
        )
        result = await self._session.execute(stmt)
        return result.rowcount


def _row_to_record(row) -> ProgressRecord:
    return ProgressRecord(
        student_id=row.student_id,
        course_id=row.course_id,
        material_id=row.material_id,
        is_completed=row.is_completed,
        time_spent=row.time_spent,
        last_accessed=row.last_accessed,
    )
