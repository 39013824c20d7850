"""Demo data for local development against the in-memory store."""

from __future__ import annotations

import logging

from courseflow.models.assignment import Assignment
from courseflow.models.course import Course, Material
from courseflow.models.user import STUDENT, TUTOR, User
from courseflow.repos.store import Store
from courseflow.services import auth_service

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo-password"
TUTOR_EMAIL = "tutor@example.com"
STUDENT_EMAIL = "student@example.com"


async def seed_demo_data(store: Store) -> Course | None:
    """One tutor, one student and a published course. Idempotent."""
    if await store.users.get_by_email(TUTOR_EMAIL) is not None:
        return None

    password_hash = auth_service.hash_password(DEMO_PASSWORD)
    tutor = User.new(
        email=TUTOR_EMAIL,
        password_hash=password_hash,
        name="Demo Tutor",
        roles=(TUTOR,),
    )
    student = User.new(
        email=STUDENT_EMAIL,
        password_hash=password_hash,
        name="Demo Student",
        roles=(STUDENT,),
    )
    await store.users.add(tutor)
    await store.users.add(student)

    course = Course.new(
        title="Intro to Databases", owner_id=tutor.id, status="published"
    )
    await store.courses.add(course)
    for i, title in enumerate(("Relational model", "SQL basics", "Joins", "Indexes")):
        await store.materials.add(
            Material.new(course_id=course.id, title=title, order_index=i)
        )
    await store.assignments.add(
        Assignment.new(
            course_id=course.id,
            title="Design a schema",
            max_score=100,
            created_by=tutor.id,
        )
    )

    logger.info(
        "Seeded demo course=%s tutor=%s student=%s",
        course.id,
        TUTOR_EMAIL,
        STUDENT_EMAIL,
    )
    return course
