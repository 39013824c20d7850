"""Exception handlers: every error leaves the API as {"detail", "code"}."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import DBAPIError
from starlette.exceptions import HTTPException as StarletteHTTPException

from courseflow.services.errors import (
    CourseflowError,
    SessionInvalidatedError,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)

_HTTP_CODES = {
    401: "unauthenticated",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
}


async def courseflow_error_handler(
    request: Request, exc: CourseflowError
) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s method=%s path=%s detail=%s",
            exc.code,
            request.method,
            request.url.path,
            exc.message,
        )
    else:
        logger.warning(
            "%s method=%s path=%s detail=%s",
            exc.code,
            request.method,
            request.url.path,
            exc.message,
        )
    headers = None
    if isinstance(exc, SessionInvalidatedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    logger.warning(
        "http error status=%s method=%s path=%s detail=%s",
        exc.status_code,
        request.method,
        request.url.path,
        exc.detail,
    )
    code = _HTTP_CODES.get(exc.status_code, "http_error")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": code},
        headers=getattr(exc, "headers", None),
    )


async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Driver messages can carry SQL and connection details; keep them in logs.
    logger.exception(
        "storage failure method=%s path=%s", request.method, request.url.path
    )
    return await courseflow_error_handler(
        request, StorageUnavailableError("Storage unavailable")
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CourseflowError, courseflow_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DBAPIError, storage_error_handler)
    app.add_exception_handler(RedisError, storage_error_handler)
