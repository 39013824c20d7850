"""Repository bundle handed to the services.

Services never import a concrete repo; they receive a ``Store`` from the
``get_store`` dependency. Without DATABASE_URL that is one process-wide
in-memory store, otherwise a PostgreSQL store bound to the request's
session.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager, nullcontext
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from courseflow.repos.assignment_repo import (
    AssignmentRepo,
    InMemoryAssignmentRepo,
    InMemorySubmissionRepo,
    SubmissionRepo,
)
from courseflow.repos.course_repo import CourseRepo, InMemoryCourseRepo
from courseflow.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from courseflow.repos.material_repo import InMemoryMaterialCatalog, MaterialCatalog
from courseflow.repos.pg_assignment_repo import PgAssignmentRepo, PgSubmissionRepo
from courseflow.repos.pg_course_repo import PgCourseRepo, PgMaterialCatalog
from courseflow.repos.pg_enrollment_repo import PgEnrollmentRepo
from courseflow.repos.pg_progress_repo import PgProgressStore
from courseflow.repos.pg_user_repo import PgUserRepo
from courseflow.repos.progress_repo import InMemoryProgressStore, ProgressStore
from courseflow.repos.user_repo import InMemoryUserRepo, UserRepo


@dataclass(frozen=True)
class Store:
    users: UserRepo
    courses: CourseRepo
    materials: MaterialCatalog
    progress: ProgressStore
    enrollments: EnrollmentRepo
    assignments: AssignmentRepo
    submissions: SubmissionRepo
    # Opens an independent unit of work (a SAVEPOINT on PostgreSQL) so one
    # failed enrollment in a fan-out does not poison the others.
    unit_of_work: Callable[[], AbstractAsyncContextManager[object]] = nullcontext


def build_memory_store() -> Store:
    materials = InMemoryMaterialCatalog()
    assignments = InMemoryAssignmentRepo()
    return Store(
        users=InMemoryUserRepo(),
        courses=InMemoryCourseRepo(),
        materials=materials,
        progress=InMemoryProgressStore(materials),
        enrollments=InMemoryEnrollmentRepo(),
        assignments=assignments,
        submissions=InMemorySubmissionRepo(assignments),
    )


def build_pg_store(session: AsyncSession) -> Store:
    return Store(
        users=PgUserRepo(session),
        courses=PgCourseRepo(session),
        materials=PgMaterialCatalog(session),
        progress=PgProgressStore(session),
        enrollments=PgEnrollmentRepo(session),
        assignments=PgAssignmentRepo(session),
        submissions=PgSubmissionRepo(session),
        unit_of_work=session.begin_nested,
    )
