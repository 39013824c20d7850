"""Derivation of an enrollment's progress from raw completion facts.

This is the only place a completion percentage is computed. Every path
that changes the material set, a completion, or a submission ends up in
``RecalculationService.recompute`` via the enrollment state machine.
"""

from __future__ import annotations

from uuid import UUID

from courseflow.models.progress import ProgressStats
from courseflow.repos.store import Store


def progress_percentage(completed: int, total: int) -> int:
    """round(100 * completed / total), half-up, clamped to [0, 100].

    Integer arithmetic avoids float drift and Python's round-half-to-even
    (1/8 is 12.5% and must report 13).
    """
    if total <= 0:
        return 0
    completed = max(0, min(completed, total))
    return (200 * completed + total) // (2 * total)


class RecalculationService:
    def __init__(self, store: Store) -> None:
        self._store = store

    async def recompute(self, student_id: UUID, course_id: UUID) -> ProgressStats:
        """Read the live material set and completion facts, return the stats.

        Performs no writes. Callers that persist the result hold the
        (student, course) serialization scope around this call.
        """
        materials = await self._store.materials.list_by_course(course_id)
        completed = await self._store.progress.count_completed(student_id, course_id)
        assignments = await self._store.assignments.list_by_course(course_id)
        submitted = await self._store.submissions.count_for_student(
            student_id, course_id
        )

        total = len(materials)
        return ProgressStats(
            total_materials=total,
            completed_materials=min(completed, total),
            progress_percentage=progress_percentage(completed, total),
            total_assignments=len(assignments),
            submitted_assignments=submitted,
        )
