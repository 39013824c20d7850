from __future__ import annotations

from typing import Protocol
from uuid import UUID

from courseflow.models.course import Material


class MaterialCatalog(Protocol):
    """The live material set of each course.

    Readers (the recalculation path) only use ``get`` and ``list_by_course``;
    ``add``/``delete`` belong to the authoring flow.
    """

    async def get(self, material_id: UUID) -> Material | None: ...
    async def list_by_course(self, course_id: UUID) -> list[Material]: ...
    async def add(self, material: Material) -> None: ...
    async def delete(self, material_id: UUID) -> bool: ...


class InMemoryMaterialCatalog:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Material] = {}

    async def get(self, material_id: UUID) -> Material | None:
        return self._by_id.get(material_id)

    async def list_by_course(self, course_id: UUID) -> list[Material]:
        materials = [m for m in self._by_id.values() if m.course_id == course_id]
        return sorted(materials, key=lambda m: m.order_index)

    async def add(self, material: Material) -> None:
        self._by_id[material.id] = material

    async def delete(self, material_id: UUID) -> bool:
        return self._by_id.pop(material_id, None) is not None

    def material_ids(self, course_id: UUID) -> set[UUID]:
        return {m.id for m in self._by_id.values() if m.course_id == course_id}
