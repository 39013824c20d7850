from __future__ import annotations

import asyncio

import pytest
from argon2 import PasswordHasher

from courseflow.models.user import User
from courseflow.repos.user_repo import InMemoryUserRepo
from courseflow.services.auth_service import (
    authenticate_user,
    hash_password,
    verify_password,
)


def test_hash_and_verify_round_trip() -> None:
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed) is True
    assert verify_password("wrong", hashed) is False


def test_verify_password_tolerates_garbage_hash() -> None:
    assert verify_password("s3cret", "not-a-hash") is False
    assert verify_password("", "anything") is False


def test_hash_password_rejects_empty() -> None:
    with pytest.raises(ValueError):
        hash_password("")


def test_authenticate_user_is_case_insensitive_on_email() -> None:
    repo = InMemoryUserRepo()
    user = User.new(email="Student@Example.com", password_hash=hash_password("pw"))
    asyncio.run(repo.add(user))

    authed = asyncio.run(authenticate_user(repo, "STUDENT@example.com ", "pw"))
    assert authed is not None
    assert authed.id == user.id
    assert asyncio.run(authenticate_user(repo, "student@example.com", "nope")) is None
    assert asyncio.run(authenticate_user(repo, "ghost@example.com", "pw")) is None


def test_authenticate_user_rehashes_when_needed() -> None:
    old_ph = PasswordHasher(time_cost=1, memory_cost=8 * 1024, parallelism=1)
    old_hash = old_ph.hash("pw123")

    repo = InMemoryUserRepo()
    asyncio.run(repo.add(User.new(email="tee@example.com", password_hash=old_hash)))

    assert asyncio.run(authenticate_user(repo, "tee@example.com", "pw123")) is not None
    stored = asyncio.run(repo.get_by_email("tee@example.com"))
    assert stored is not None
    assert stored.password_hash != old_hash
