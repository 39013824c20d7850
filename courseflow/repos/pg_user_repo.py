"""PostgreSQL implementation of UserRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from courseflow.db.tables import UserRow
from courseflow.models.user import User
from courseflow.services.errors import ConflictError

_users = UserRow.__table__


class PgUserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(_users).where(_users.c.email == email.strip().lower())
        row = (await self._session.execute(stmt)).one_or_none()
        return None if row is None else _row_to_user(row)

    async def add(self, user: User) -> None:
        try:
            async with self._session.begin_nested():
                await self._session.execute(
                    _users.insert().values(
                        id=user.id,
                        email=user.email,
                        password_hash=user.password_hash,
                        name=user.name,
                        roles=list(user.roles),
                        is_active=user.is_active,
                    )
                )
        except IntegrityError:
            raise ConflictError("email already exists") from None

    async def update_password_hash(self, user_id: UUID, password_hash: str) -> None:
        await self._session.execute(
            update(_users)
            .where(_users.c.id == user_id)
            .values(password_hash=password_hash)
        )


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        name=row.name or "",
        roles=tuple(row.roles or ()),
        is_active=row.is_active,
    )
