"""Domain errors raised by the progress engine.

Each class carries the HTTP status and machine-readable ``code`` the API
layer uses when rendering it (see courseflow/api/errors.py). Services raise
these synchronously from the operation that detects the condition.
"""

from __future__ import annotations


class CourseflowError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(CourseflowError):
    status_code = 404
    code = "not_found"


class ForbiddenError(CourseflowError):
    status_code = 403
    code = "forbidden"


class ConflictError(CourseflowError):
    status_code = 409
    code = "conflict"


class ValidationFailedError(CourseflowError):
    status_code = 400
    code = "validation_failed"


class SessionInvalidatedError(CourseflowError):
    """The credential's session token is no longer the account's active one.

    Distinct from a plain authentication failure so clients can say
    "you were logged in elsewhere" instead of "please log in".
    """

    status_code = 401
    code = "session_invalidated"


class StorageUnavailableError(CourseflowError):
    status_code = 500
    code = "storage_unavailable"
