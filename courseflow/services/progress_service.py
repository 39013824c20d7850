"""Material engagement, completion, authoring and the progress overview."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from courseflow.models.assignment import Assignment, AssignmentSubmission
from courseflow.models.course import Material
from courseflow.models.enrollment import Enrollment
from courseflow.models.principal import Principal
from courseflow.models.progress import BulkRecalculation, ProgressRecord, ProgressStats
from courseflow.repos.store import Store
from courseflow.services.access import ensure_course_manager, ensure_participating
from courseflow.services.clock import Clock, utc_now
from courseflow.services.enrollment_state import EnrollmentStateMachine
from courseflow.services.errors import NotFoundError
from courseflow.services.recalculation import RecalculationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CompletionResult:
    record: ProgressRecord
    enrollment: Enrollment
    stats: ProgressStats


@dataclass(frozen=True, slots=True)
class ProgressOverview:
    enrollment: Enrollment
    materials: list[tuple[Material, ProgressRecord | None]]
    assignments: list[tuple[Assignment, AssignmentSubmission | None]]
    stats: ProgressStats
    total_time_spent: int


class ProgressService:
    def __init__(
        self,
        store: Store,
        state: EnrollmentStateMachine | None = None,
        *,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._recalculation = RecalculationService(store)
        self._state = state or EnrollmentStateMachine(
            store, self._recalculation, clock=clock
        )
        self._clock = clock

    async def _material(self, material_id: UUID) -> Material:
        material = await self._store.materials.get(material_id)
        if material is None:
            raise NotFoundError("Material not found")
        return material

    async def open_material(
        self, student_id: UUID, material_id: UUID
    ) -> tuple[Material, ProgressRecord]:
        """Record an access. Completion is untouched, so nothing is recomputed."""
        material = await self._material(material_id)
        enrollment = await self._store.enrollments.find(student_id, material.course_id)
        ensure_participating(enrollment, "access this material")

        record = await self._store.progress.touch(
            student_id, material.course_id, material.id, self._clock()
        )
        return material, record

    async def complete_material(
        self, student_id: UUID, material_id: UUID
    ) -> CompletionResult:
        material = await self._material(material_id)
        enrollment = await self._store.enrollments.find(student_id, material.course_id)
        ensure_participating(enrollment, "complete this material")

        record = await self._store.progress.mark_complete(
            student_id, material.course_id, material.id, self._clock()
        )
        updated, stats = await self._state.refresh(
            student_id, material.course_id, trigger="completion"
        )
        logger.info(
            "Material completed student=%s material=%s progress=%d%%",
            student_id,
            material.id,
            updated.progress_percentage,
        )
        return CompletionResult(record=record, enrollment=updated, stats=stats)

    async def overview(
        self,
        viewer: Principal,
        course_id: UUID,
        student_id: UUID | None = None,
    ) -> ProgressOverview:
        """Read-only view of one enrollment; never writes the percentage.

        Students see their own progress. The course owner or an admin may
        pass ``student_id`` to view anyone enrolled.
        """
        course = await self._store.courses.get(course_id)
        if course is None:
            raise NotFoundError("Course not found")
        if student_id is None:
            student_id = viewer.user_id
        elif student_id != viewer.user_id:
            ensure_course_manager(viewer, course)

        enrollment = await self._store.enrollments.find(student_id, course_id)
        if enrollment is None:
            raise NotFoundError("Enrollment not found")

        materials = await self._store.materials.list_by_course(course_id)
        records = {
            r.material_id: r
            for r in await self._store.progress.list_for_student(student_id, course_id)
        }
        assignments = await self._store.assignments.list_by_course(course_id)
        submissions = {
            s.assignment_id: s
            for s in await self._store.submissions.list_for_student(
                student_id, course_id
            )
        }
        stats = await self._recalculation.recompute(student_id, course_id)

        return ProgressOverview(
            enrollment=enrollment,
            materials=[(m, records.get(m.id)) for m in materials],
            assignments=[(a, submissions.get(a.id)) for a in assignments],
            stats=stats,
            total_time_spent=sum(r.time_spent for r in records.values()),
        )

    async def add_material(
        self,
        principal: Principal,
        course_id: UUID,
        *,
        title: str,
        order_index: int,
        module_id: UUID | None = None,
        kind: str = "document",
        url: str | None = None,
    ) -> tuple[Material, BulkRecalculation]:
        course = await self._store.courses.get(course_id)
        if course is None:
            raise NotFoundError("Course not found")
        ensure_course_manager(principal, course)

        material = Material.new(
            course_id=course_id,
            title=title,
            order_index=order_index,
            module_id=module_id,
            kind=kind,
            url=url,
        )
        await self._store.materials.add(material)
        logger.info("Material added course=%s material=%s", course_id, material.id)

        summary = await self._state.refresh_course(course_id, trigger="material_added")
        return material, summary

    async def delete_material(
        self, principal: Principal, material_id: UUID
    ) -> BulkRecalculation:
        material = await self._material(material_id)
        course = await self._store.courses.get(material.course_id)
        if course is None:
            raise NotFoundError("Course not found")
        ensure_course_manager(principal, course)

        await self._store.materials.delete(material.id)
        removed = await self._store.progress.delete_for_material(material.id)
        logger.info(
            "Material deleted course=%s material=%s progress_records=%d",
            course.id,
            material.id,
            removed,
        )
        return await self._state.refresh_course(course.id, trigger="material_deleted")
