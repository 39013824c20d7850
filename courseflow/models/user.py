from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4

# Platform roles. "student" accounts are subject to the single-session gate;
# "tutor" and "admin" are staff accounts that author courses and grade.
STUDENT = "student"
TUTOR = "tutor"
ADMIN = "admin"


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    email: str
    password_hash: str
    name: str = ""
    roles: tuple[str, ...] = ()  # immutable
    is_active: bool = True

    @property
    def is_student(self) -> bool:
        return STUDENT in self.roles

    @staticmethod
    def new(
        *,
        email: str,
        password_hash: str,
        name: str = "",
        roles: tuple[str, ...] = (STUDENT,),
    ) -> User:
        return User(
            id=uuid4(),
            email=email.strip().lower(),
            password_hash=password_hash,
            name=name,
            roles=roles,
            is_active=True,
        )
