from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    title: str
    owner_id: UUID
    status: str = "draft"  # draft|published|archived
    is_public: bool = True

    @property
    def open_for_enrollment(self) -> bool:
        return self.status == "published" and self.is_public

    @staticmethod
    def new(
        *,
        title: str,
        owner_id: UUID,
        status: str = "draft",
        is_public: bool = True,
    ) -> Course:
        return Course(
            id=uuid4(),
            title=title,
            owner_id=owner_id,
            status=status,
            is_public=is_public,
        )


@dataclass(frozen=True, slots=True)
class Material:
    id: UUID
    course_id: UUID
    title: str
    order_index: int
    module_id: UUID | None = None
    kind: str = "document"  # document|video|link
    url: str | None = None

    @staticmethod
    def new(
        *,
        course_id: UUID,
        title: str,
        order_index: int,
        module_id: UUID | None = None,
        kind: str = "document",
        url: str | None = None,
    ) -> Material:
        return Material(
            id=uuid4(),
            course_id=course_id,
            title=title,
            order_index=order_index,
            module_id=module_id,
            kind=kind,
            url=url,
        )
