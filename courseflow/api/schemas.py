"""Response models shared by more than one router.

Field names are camelCase on the wire, matching the web client.
"""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel

from courseflow.models.assignment import AssignmentSubmission
from courseflow.models.course import Material
from courseflow.models.enrollment import Enrollment
from courseflow.models.progress import (
    BulkRecalculation,
    ProgressRecord,
    ProgressStats,
)


class EnrollmentOut(BaseModel):
    studentId: UUID
    courseId: UUID
    status: str
    progressPercentage: int
    enrolledAt: int
    completedAt: int | None

    @staticmethod
    def of(e: Enrollment) -> EnrollmentOut:
        return EnrollmentOut(
            studentId=e.student_id,
            courseId=e.course_id,
            status=e.status,
            progressPercentage=e.progress_percentage,
            enrolledAt=e.enrolled_at,
            completedAt=e.completed_at,
        )


class MaterialOut(BaseModel):
    id: UUID
    courseId: UUID
    moduleId: UUID | None
    title: str
    kind: str
    url: str | None
    orderIndex: int

    @staticmethod
    def of(m: Material) -> MaterialOut:
        return MaterialOut(
            id=m.id,
            courseId=m.course_id,
            moduleId=m.module_id,
            title=m.title,
            kind=m.kind,
            url=m.url,
            orderIndex=m.order_index,
        )


class SubmissionOut(BaseModel):
    id: UUID
    assignmentId: UUID
    studentId: UUID
    content: str
    fileUrl: str | None
    status: str
    score: int | None
    feedback: str | None
    submittedAt: int
    gradedAt: int | None

    @staticmethod
    def of(s: AssignmentSubmission) -> SubmissionOut:
        return SubmissionOut(
            id=s.id,
            assignmentId=s.assignment_id,
            studentId=s.student_id,
            content=s.content,
            fileUrl=s.file_url,
            status=s.status,
            score=s.score,
            feedback=s.feedback,
            submittedAt=s.submitted_at,
            gradedAt=s.graded_at,
        )


class ProgressUpdateOut(BaseModel):
    """Progress snapshot returned by every write that recomputes."""

    progressPercentage: int
    totalItems: int
    completedItems: int

    @staticmethod
    def of(enrollment: Enrollment, stats: ProgressStats) -> ProgressUpdateOut:
        return ProgressUpdateOut(
            progressPercentage=enrollment.progress_percentage,
            totalItems=stats.total_items,
            completedItems=stats.completed_items,
        )


class BulkRecalculationOut(BaseModel):
    courseId: UUID
    enrollments: int
    recalculated: int
    failed: int

    @staticmethod
    def of(b: BulkRecalculation) -> BulkRecalculationOut:
        return BulkRecalculationOut(
            courseId=b.course_id,
            enrollments=b.enrollments,
            recalculated=b.recalculated,
            failed=b.failed,
        )


class MaterialProgressOut(BaseModel):
    isCompleted: bool
    timeSpent: int
    lastAccessed: int | None

    @staticmethod
    def of(r: ProgressRecord) -> MaterialProgressOut:
        return MaterialProgressOut(
            isCompleted=r.is_completed,
            timeSpent=r.time_spent,
            lastAccessed=r.last_accessed,
        )
