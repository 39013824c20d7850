"""Request context middleware: request IDs, caller identity, timing.

Concurrent requests interleave their log lines on the same thread, so
every record is stamped from ``contextvars`` rather than thread-locals:

  request_id  set here from X-Request-ID or a fresh UUID
  user_id     set by ``require_user`` once the bearer token is validated

A recomputation logged deep inside the enrollment state machine can then
be traced back to the request and the student that caused it.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")
user_id_var: ContextVar[str | None] = ContextVar("user_id", default=None)


def _install_record_factory() -> None:
    """Stamp request context onto every LogRecord at creation time.

    A filter on the root logger only sees records logged to the root
    logger itself, not the ones propagated from module loggers, so the
    stamping happens in the record factory instead.
    """
    base_factory = logging.getLogRecordFactory()
    if getattr(base_factory, "_courseflow_context", False):
        return

    def factory(*args, **kwargs) -> logging.LogRecord:
        record = base_factory(*args, **kwargs)
        record.request_id = request_id_var.get()
        record.user_id = user_id_var.get()
        return record

    factory._courseflow_context = True  # type: ignore[attr-defined]
    logging.setLogRecordFactory(factory)


_install_record_factory()


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, time the request, log one summary line."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)
        user_id_var.set(None)

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        logger.info(
            "%s %s -> %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
