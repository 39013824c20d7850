from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ProgressRecord:
    """Raw fact: this student engaged with (or completed) this material.

    Keyed by (student_id, course_id, material_id). ``time_spent`` counts
    accesses; ``last_accessed`` is a Unix timestamp.
    """

    student_id: UUID
    course_id: UUID
    material_id: UUID
    is_completed: bool = False
    time_spent: int = 0
    last_accessed: int | None = None


@dataclass(frozen=True, slots=True)
class ProgressStats:
    """Result of a recalculation for one (student, course) pair.

    ``progress_percentage`` is derived from materials only and is the value
    persisted on the enrollment. Assignment counters feed the combined
    item totals reported alongside it.
    """

    total_materials: int
    completed_materials: int
    progress_percentage: int
    total_assignments: int = 0
    submitted_assignments: int = 0

    @property
    def total_items(self) -> int:
        return self.total_materials + self.total_assignments

    @property
    def completed_items(self) -> int:
        return self.completed_materials + self.submitted_assignments


@dataclass(frozen=True, slots=True)
class BulkRecalculation:
    """Aggregate outcome of a course-wide recomputation fan-out."""

    course_id: UUID
    enrollments: int
    recalculated: int
    failed: int
