from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from courseflow.models.user import ADMIN, STUDENT


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated access token.

    Carried through the request via FastAPI's dependency system.

        user_id: subject from the token
        roles: platform roles (student, tutor, admin)
        session_id: the ``sid`` claim; only student credentials carry one
    """

    user_id: UUID
    roles: frozenset[str]
    session_id: str | None = None

    def is_student(self) -> bool:
        return STUDENT in self.roles

    def is_admin(self) -> bool:
        return ADMIN in self.roles
