from __future__ import annotations

import logging

from courseflow.models.course import Course
from courseflow.models.enrollment import Enrollment
from courseflow.models.principal import Principal
from courseflow.services.errors import ForbiddenError

logger = logging.getLogger(__name__)


def ensure_course_manager(principal: Principal, course: Course) -> None:
    """Course owner or platform admin, else ForbiddenError."""
    if principal.is_admin() or course.owner_id == principal.user_id:
        return
    logger.warning(
        "Access denied: user=%s does not manage course=%s",
        principal.user_id,
        course.id,
    )
    raise ForbiddenError("Access denied")


def ensure_participating(enrollment: Enrollment | None, action: str) -> Enrollment:
    """A live (non-dropped) enrollment is required to make progress."""
    if enrollment is None or enrollment.is_dropped:
        raise ForbiddenError(f"You must be enrolled in this course to {action}")
    return enrollment
