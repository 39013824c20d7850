"""Enrollment lifecycle: ACTIVE -> COMPLETED, plus manual drops.

The persisted ``progress_percentage`` and the COMPLETED transition are
written only here, always from a fresh recalculation taken inside the
(student, course) serialization scope.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from uuid import UUID

from courseflow.core.metrics import (
    ENROLLMENTS_COMPLETED,
    RECOMPUTATIONS,
    RECOMPUTE_FAILURES,
)
from courseflow.models.enrollment import (
    ACTIVE,
    COMPLETED,
    DROPPED,
    Enrollment,
    EnrollmentStatus,
)
from courseflow.models.principal import Principal
from courseflow.models.progress import BulkRecalculation, ProgressStats
from courseflow.repos.store import Store
from courseflow.services.access import ensure_course_manager
from courseflow.services.clock import Clock, utc_now
from courseflow.services.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
)
from courseflow.services.locks import KeyedLock, enrollment_locks
from courseflow.services.recalculation import RecalculationService

logger = logging.getLogger(__name__)


def advance(enrollment: Enrollment, percentage: int, now: int) -> Enrollment:
    """Apply a recomputed percentage to an enrollment.

    ACTIVE at 100% becomes COMPLETED stamped with ``now``. COMPLETED is
    never demoted automatically and keeps its original ``completed_at``.
    DROPPED only has its percentage refreshed.
    """
    if enrollment.status == ACTIVE and percentage == 100:
        return replace(
            enrollment,
            status=COMPLETED,
            progress_percentage=percentage,
            completed_at=now,
        )
    return replace(enrollment, progress_percentage=percentage)


class EnrollmentStateMachine:
    def __init__(
        self,
        store: Store,
        recalculation: RecalculationService | None = None,
        *,
        clock: Clock = utc_now,
        locks: KeyedLock = enrollment_locks,
    ) -> None:
        self._store = store
        self._recalculation = recalculation or RecalculationService(store)
        self._clock = clock
        self._locks = locks

    async def enroll(self, principal: Principal, course_id: UUID) -> Enrollment:
        if not principal.is_student():
            raise ForbiddenError("Only students can enroll in courses")

        course = await self._store.courses.get(course_id)
        if course is None:
            raise NotFoundError("Course not found")
        if not course.open_for_enrollment:
            raise ValidationFailedError("Course is not available for enrollment")

        enrollment = Enrollment.new(
            student_id=principal.user_id,
            course_id=course_id,
            enrolled_at=self._clock(),
        )
        await self._store.enrollments.create(enrollment)
        logger.info(
            "Enrolled student=%s course=%s", principal.user_id, course_id
        )
        return enrollment

    async def refresh(
        self, student_id: UUID, course_id: UUID, *, trigger: str
    ) -> tuple[Enrollment, ProgressStats]:
        """Recompute and persist one enrollment's progress."""
        async with self._locks.hold((student_id, course_id)):
            enrollment = await self._store.enrollments.find_for_update(
                student_id, course_id
            )
            if enrollment is None:
                raise NotFoundError("Enrollment not found")
            return await self._apply(enrollment, enrollment.status, trigger)

    async def refresh_course(
        self, course_id: UUID, *, trigger: str
    ) -> BulkRecalculation:
        """Recompute every enrollment of a course after its material set changed.

        Each enrollment runs in its own unit of work; one failure is logged
        and counted without aborting the rest.
        """
        enrollments = await self._store.enrollments.list_by_course(course_id)
        recalculated = 0
        failed = 0
        for enrollment in enrollments:
            try:
                async with self._store.unit_of_work():
                    await self.refresh(
                        enrollment.student_id, course_id, trigger=trigger
                    )
            except Exception:
                failed += 1
                RECOMPUTE_FAILURES.inc()
                logger.exception(
                    "Recompute failed student=%s course=%s trigger=%s",
                    enrollment.student_id,
                    course_id,
                    trigger,
                    extra={
                        "student_id": str(enrollment.student_id),
                        "course_id": str(course_id),
                        "trigger": trigger,
                    },
                )
            else:
                recalculated += 1

        logger.info(
            "Course recompute course=%s trigger=%s enrollments=%d failed=%d",
            course_id,
            trigger,
            len(enrollments),
            failed,
            extra={"course_id": str(course_id), "trigger": trigger},
        )
        return BulkRecalculation(
            course_id=course_id,
            enrollments=len(enrollments),
            recalculated=recalculated,
            failed=failed,
        )

    async def set_status(
        self,
        principal: Principal,
        student_id: UUID,
        course_id: UUID,
        status: EnrollmentStatus,
    ) -> Enrollment:
        """Manual status change.

        Students may only drop their own enrollment. The course owner or an
        admin may set any status; COMPLETED is accepted only when the
        recomputed percentage is 100, and ACTIVE goes through the normal
        completion rule again. DROPPED is terminal: nobody can move a
        dropped enrollment to another status.
        """
        course = await self._store.courses.get(course_id)
        if course is None:
            raise NotFoundError("Course not found")

        if principal.user_id == student_id and not principal.is_admin():
            if course.owner_id != principal.user_id and status != DROPPED:
                raise ForbiddenError("Students may only drop their enrollment")
        else:
            ensure_course_manager(principal, course)

        async with self._locks.hold((student_id, course_id)):
            enrollment = await self._store.enrollments.find_for_update(
                student_id, course_id
            )
            if enrollment is None:
                raise NotFoundError("Enrollment not found")
            if enrollment.is_dropped and status != DROPPED:
                logger.warning(
                    "Rejected %s for dropped enrollment student=%s course=%s by=%s",
                    status,
                    student_id,
                    course_id,
                    principal.user_id,
                )
                raise ConflictError("A dropped enrollment cannot be reopened")
            updated, _ = await self._apply(enrollment, status, "manual")

        logger.info(
            "Enrollment status set student=%s course=%s %s -> %s by=%s",
            student_id,
            course_id,
            enrollment.status,
            updated.status,
            principal.user_id,
        )
        return updated

    async def _apply(
        self, enrollment: Enrollment, status: EnrollmentStatus, trigger: str
    ) -> tuple[Enrollment, ProgressStats]:
        # Caller holds the (student, course) lock.
        stats = await self._recalculation.recompute(
            enrollment.student_id, enrollment.course_id
        )
        now = self._clock()

        if status == enrollment.status:
            target = enrollment
        elif status == COMPLETED:
            if stats.progress_percentage != 100:
                raise ValidationFailedError(
                    "Enrollment cannot be completed before all materials are"
                    f" done (progress {stats.progress_percentage}%)"
                )
            target = replace(enrollment, status=COMPLETED, completed_at=now)
        elif status == ACTIVE:
            target = replace(enrollment, status=ACTIVE, completed_at=None)
        else:
            target = replace(enrollment, status=DROPPED)

        updated = advance(target, stats.progress_percentage, now)
        RECOMPUTATIONS.labels(trigger).inc()

        if updated != enrollment:
            persisted = await self._store.enrollments.update_status_and_percentage(
                enrollment.student_id,
                enrollment.course_id,
                status=updated.status,
                progress_percentage=updated.progress_percentage,
                completed_at=updated.completed_at,
            )
            if persisted is None:
                raise NotFoundError("Enrollment not found")
            updated = persisted

        if enrollment.status != COMPLETED and updated.status == COMPLETED:
            ENROLLMENTS_COMPLETED.inc()
            logger.info(
                "Enrollment completed student=%s course=%s trigger=%s",
                enrollment.student_id,
                enrollment.course_id,
                trigger,
            )
        return updated, stats
