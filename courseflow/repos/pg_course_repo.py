"""PostgreSQL implementations of CourseRepo and MaterialCatalog."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from courseflow.db.tables import CourseRow, MaterialRow
from courseflow.models.course import Course, Material


class PgCourseRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, course_id: UUID) -> Course | None:
        row = await self._session.get(CourseRow, course_id)
        if row is None:
            return None
        return Course(
            id=row.id,
            title=row.title,
            owner_id=row.owner_id,
            status=row.status,
            is_public=row.is_public,
        )

    async def add(self, course: Course) -> None:
        self._session.add(
            CourseRow(
                id=course.id,
                title=course.title,
                owner_id=course.owner_id,
                status=course.status,
                is_public=course.is_public,
            )
        )
        await self._session.flush()


class PgMaterialCatalog:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, material_id: UUID) -> Material | None:
        row = await self._session.get(MaterialRow, material_id)
        return None if row is None else _row_to_material(row)

    async def list_by_course(self, course_id: UUID) -> list[Material]:
        stmt = (
            select(MaterialRow)
            .where(MaterialRow.course_id == course_id)
            .order_by(MaterialRow.order_index, MaterialRow.id)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_material(r) for r in rows]

    async def add(self, material: Material) -> None:
        self._session.add(
            MaterialRow(
                id=material.id,
                course_id=material.course_id,
                module_id=material.module_id,
                title=material.title,
                kind=material.kind,
                url=material.url,
                order_index=material.order_index,
            )
        )
        await self._session.flush()

    async def delete(self, material_id: UUID) -> bool:
        stmt = delete(MaterialRow).where(MaterialRow.id == material_id)
        result = await self._session.execute(stmt)
        return result.rowcount > 0


def _row_to_material(row: MaterialRow) -> Material:
    return Material(
        id=row.id,
        course_id=row.course_id,
        title=row.title,
        order_index=row.order_index,
        module_id=row.module_id,
        kind=row.kind,
        url=row.url,
    )
