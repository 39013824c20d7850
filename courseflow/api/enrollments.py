from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from courseflow.api.dependencies import (
    get_progress_service,
    get_state_machine,
    require_user,
)
from courseflow.api.schemas import (
    EnrollmentOut,
    MaterialOut,
    MaterialProgressOut,
    SubmissionOut,
)
from courseflow.models.enrollment import EnrollmentStatus
from courseflow.models.principal import Principal
from courseflow.services.enrollment_state import EnrollmentStateMachine
from courseflow.services.progress_service import ProgressService

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


class MaterialWithProgressOut(MaterialOut):
    progress: MaterialProgressOut | None


class AssignmentWithSubmissionOut(BaseModel):
    id: UUID
    courseId: UUID
    title: str
    maxScore: int
    dueDate: int | None
    submission: SubmissionOut | None


class StatsOut(BaseModel):
    totalMaterials: int
    completedMaterials: int
    totalAssignments: int
    submittedAssignments: int
    totalItems: int
    completedItems: int
    progressPercentage: int
    totalTimeSpent: int


class ProgressOverviewOut(BaseModel):
    enrollment: EnrollmentOut
    materials: list[MaterialWithProgressOut]
    assignments: list[AssignmentWithSubmissionOut]
    stats: StatsOut


class StatusIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: EnrollmentStatus
    studentId: UUID | None = None


@router.get("/progress/{course_id}", response_model=ProgressOverviewOut)
async def get_progress(
    course_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    progress: Annotated[ProgressService, Depends(get_progress_service)],
    studentId: UUID | None = None,
) -> ProgressOverviewOut:
    view = await progress.overview(principal, course_id, studentId)

    materials = [
        MaterialWithProgressOut(
            **MaterialOut.of(m).model_dump(),
            progress=MaterialProgressOut.of(r) if r is not None else None,
        )
        for m, r in view.materials
    ]

    assignments = [
        AssignmentWithSubmissionOut(
            id=a.id,
            courseId=a.course_id,
            title=a.title,
            maxScore=a.max_score,
            dueDate=a.due_date,
            submission=SubmissionOut.of(s) if s is not None else None,
        )
        for a, s in view.assignments
    ]

    stats = view.stats
    return ProgressOverviewOut(
        enrollment=EnrollmentOut.of(view.enrollment),
        materials=materials,
        assignments=assignments,
        stats=StatsOut(
            totalMaterials=stats.total_materials,
            completedMaterials=stats.completed_materials,
            totalAssignments=stats.total_assignments,
            submittedAssignments=stats.submitted_assignments,
            totalItems=stats.total_items,
            completedItems=stats.completed_items,
            progressPercentage=stats.progress_percentage,
            totalTimeSpent=view.total_time_spent,
        ),
    )


@router.put("/{course_id}/status", response_model=EnrollmentOut)
async def update_status(
    course_id: UUID,
    body: StatusIn,
    principal: Annotated[Principal, Depends(require_user)],
    state: Annotated[EnrollmentStateMachine, Depends(get_state_machine)],
) -> EnrollmentOut:
    """Manual status change; defaults to the caller's own enrollment."""
    student_id = body.studentId or principal.user_id
    enrollment = await state.set_status(principal, student_id, course_id, body.status)
    return EnrollmentOut.of(enrollment)
