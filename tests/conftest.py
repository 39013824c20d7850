from __future__ import annotations

import asyncio
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from courseflow.api.dependencies import get_store
from courseflow.main import app
from courseflow.models.assignment import Assignment
from courseflow.models.course import Course, Material
from courseflow.models.enrollment import Enrollment
from courseflow.models.user import ADMIN, STUDENT, TUTOR, User
from courseflow.repos.store import Store, build_memory_store
from courseflow.services import token_service
from courseflow.services.session_gate import session_gate
from courseflow.services.session_slots import session_slots

# Ensure repo root is on sys.path so `import courseflow` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Argon2 is slow on purpose; tests that never log in skip hashing entirely.
PLACEHOLDER_HASH = "not-a-real-hash"


@pytest.fixture
def store() -> Iterator[Store]:
    """Fresh in-memory store wired into the app for this test only."""
    s = build_memory_store()
    app.dependency_overrides[get_store] = lambda: s
    yield s
    app.dependency_overrides.pop(get_store, None)


@pytest.fixture(autouse=True)
def reset_session_slots() -> None:
    """Clear session slots between tests."""
    if hasattr(session_slots, "_slots"):
        session_slots._slots.clear()  # type: ignore[union-attr]


@pytest.fixture
def client(store: Store) -> TestClient:
    return TestClient(app)


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------


def add_user(store: Store, email: str, roles: tuple[str, ...]) -> User:
    user = User.new(email=email, password_hash=PLACEHOLDER_HASH, roles=roles)
    asyncio.run(store.users.add(user))
    return user


def add_course(store: Store, owner: User, **kwargs) -> Course:
    kwargs.setdefault("status", "published")
    course = Course.new(title="Intro to Databases", owner_id=owner.id, **kwargs)
    asyncio.run(store.courses.add(course))
    return course


def add_materials(store: Store, course: Course, count: int) -> list[Material]:
    materials = [
        Material.new(course_id=course.id, title=f"Lesson {i + 1}", order_index=i)
        for i in range(count)
    ]
    for m in materials:
        asyncio.run(store.materials.add(m))
    return materials


def add_assignment(
    store: Store,
    course: Course,
    creator: User,
    *,
    max_score: int = 100,
    due_date: int | None = None,
) -> Assignment:
    assignment = Assignment.new(
        course_id=course.id,
        title="Design a schema",
        max_score=max_score,
        created_by=creator.id,
        due_date=due_date,
    )
    asyncio.run(store.assignments.add(assignment))
    return assignment


def enroll(store: Store, student: User, course: Course) -> Enrollment:
    enrollment = Enrollment.new(
        student_id=student.id, course_id=course.id, enrolled_at=1_700_000_000
    )
    asyncio.run(store.enrollments.create(enrollment))
    return enrollment


def student_token(user: User) -> str:
    """Log the student in: open a session and mint a token carrying its sid."""
    sid = asyncio.run(session_gate.open_session(user.id))
    return token_service.create_access_token(
        sub=str(user.id), roles=list(user.roles), sid=sid
    )


def staff_token(user: User) -> str:
    return token_service.create_access_token(sub=str(user.id), roles=list(user.roles))


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Common actors
# ---------------------------------------------------------------------------


@pytest.fixture
def tutor(store: Store) -> User:
    return add_user(store, "tutor@example.com", (TUTOR,))


@pytest.fixture
def admin(store: Store) -> User:
    return add_user(store, "admin@example.com", (ADMIN,))


@pytest.fixture
def student(store: Store) -> User:
    return add_user(store, "student@example.com", (STUDENT,))


@pytest.fixture
def course(store: Store, tutor: User) -> Course:
    return add_course(store, tutor)
