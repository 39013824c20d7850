from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from courseflow.api.dependencies import get_grading, require_user
from courseflow.api.schemas import ProgressUpdateOut, SubmissionOut
from courseflow.models.principal import Principal
from courseflow.services.grading import AssignmentGradingWorkflow

router = APIRouter(prefix="/assignments", tags=["assignments"])


class SubmitIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str | None = None
    fileUrl: str | None = None


class SubmitOut(BaseModel):
    submission: SubmissionOut
    progressUpdate: ProgressUpdateOut


class GradeIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    score: int
    feedback: str | None = Field(default=None, max_length=5000)


@router.post(
    "/{assignment_id}/submit",
    response_model=SubmitOut,
    status_code=status.HTTP_201_CREATED,
)
async def submit_assignment(
    assignment_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    grading: Annotated[AssignmentGradingWorkflow, Depends(get_grading)],
    body: SubmitIn | None = None,
) -> SubmitOut:
    body = body or SubmitIn()
    result = await grading.submit(
        principal.user_id,
        assignment_id,
        content=body.content or "",
        file_url=body.fileUrl,
    )
    return SubmitOut(
        submission=SubmissionOut.of(result.submission),
        progressUpdate=ProgressUpdateOut.of(result.enrollment, result.stats),
    )


@router.put("/submissions/{submission_id}/grade", response_model=SubmissionOut)
async def grade_submission(
    submission_id: UUID,
    body: GradeIn,
    principal: Annotated[Principal, Depends(require_user)],
    grading: Annotated[AssignmentGradingWorkflow, Depends(get_grading)],
) -> SubmissionOut:
    """Grade once. Score range is checked against the assignment's maximum."""
    graded = await grading.grade(
        principal, submission_id, score=body.score, feedback=body.feedback
    )
    return SubmissionOut.of(graded)
