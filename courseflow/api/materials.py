from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from courseflow.api.dependencies import get_progress_service, require_user
from courseflow.api.schemas import (
    BulkRecalculationOut,
    MaterialOut,
    MaterialProgressOut,
)
from courseflow.models.principal import Principal
from courseflow.services.progress_service import ProgressService

router = APIRouter(prefix="/materials", tags=["materials"])


class MaterialViewOut(MaterialOut):
    progress: MaterialProgressOut


class CompletionOut(BaseModel):
    progressPercentage: int
    isCompleted: bool
    totalItems: int
    completedItems: int


@router.get("/{material_id}", response_model=MaterialViewOut)
async def get_material(
    material_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    progress: Annotated[ProgressService, Depends(get_progress_service)],
) -> MaterialViewOut:
    """Return the material and record the access."""
    material, record = await progress.open_material(principal.user_id, material_id)
    return MaterialViewOut(
        **MaterialOut.of(material).model_dump(),
        progress=MaterialProgressOut.of(record),
    )


@router.post("/{material_id}/complete", response_model=CompletionOut)
async def complete_material(
    material_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    progress: Annotated[ProgressService, Depends(get_progress_service)],
) -> CompletionOut:
    result = await progress.complete_material(principal.user_id, material_id)
    return CompletionOut(
        progressPercentage=result.enrollment.progress_percentage,
        isCompleted=result.record.is_completed,
        totalItems=result.stats.total_items,
        completedItems=result.stats.completed_items,
    )


@router.delete("/{material_id}", response_model=BulkRecalculationOut)
async def delete_material(
    material_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    progress: Annotated[ProgressService, Depends(get_progress_service)],
) -> BulkRecalculationOut:
    """Delete a material and its progress records, then recompute the course."""
    summary = await progress.delete_material(principal, material_id)
    return BulkRecalculationOut.of(summary)
