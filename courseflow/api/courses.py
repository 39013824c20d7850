from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, ConfigDict, Field

from courseflow.api.dependencies import (
    get_progress_service,
    get_state_machine,
    require_user,
)
from courseflow.api.schemas import BulkRecalculationOut, EnrollmentOut, MaterialOut
from courseflow.models.principal import Principal
from courseflow.services.enrollment_state import EnrollmentStateMachine
from courseflow.services.progress_service import ProgressService

router = APIRouter(prefix="/courses", tags=["courses"])


class MaterialIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=200)
    orderIndex: int = Field(ge=0)
    moduleId: UUID | None = None
    kind: str = "document"
    url: str | None = None


class MaterialCreatedOut(BaseModel):
    material: MaterialOut
    recalculation: BulkRecalculationOut


@router.post(
    "/{course_id}/enroll",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
async def enroll(
    course_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    state: Annotated[EnrollmentStateMachine, Depends(get_state_machine)],
) -> EnrollmentOut:
    enrollment = await state.enroll(principal, course_id)
    return EnrollmentOut.of(enrollment)


@router.post(
    "/{course_id}/materials",
    response_model=MaterialCreatedOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_material(
    course_id: UUID,
    body: MaterialIn,
    principal: Annotated[Principal, Depends(require_user)],
    progress: Annotated[ProgressService, Depends(get_progress_service)],
) -> MaterialCreatedOut:
    """Add a material; every enrollment of the course is recomputed."""
    material, summary = await progress.add_material(
        principal,
        course_id,
        title=body.title,
        order_index=body.orderIndex,
        module_id=body.moduleId,
        kind=body.kind,
        url=body.url,
    )
    return MaterialCreatedOut(
        material=MaterialOut.of(material),
        recalculation=BulkRecalculationOut.of(summary),
    )
