"""Password hashing and credential checks behind POST /auth/login."""

from __future__ import annotations

import logging
from functools import lru_cache

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from courseflow.models.user import User
from courseflow.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)

_ph = PasswordHasher()


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


@lru_cache(maxsize=1)
def _decoy_hash() -> str:
    return _ph.hash("courseflow-decoy-password")


async def authenticate_user(repo: UserRepo, email: str, password: str) -> User | None:
    """Return the active user owning ``email`` and ``password``, else None.

    Unknown emails still pay for one argon2 verification, so response
    time does not reveal which accounts exist.
    """
    user = await repo.get_by_email(email.strip().lower())
    if user is None:
        verify_password(password, _decoy_hash())
        return None
    if not user.is_active or not verify_password(password, user.password_hash):
        return None

    if _ph.check_needs_rehash(user.password_hash):
        await repo.update_password_hash(user.id, _ph.hash(password))
        logger.info("Rehashed password for user=%s", user.id)

    return user
