from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from courseflow.db.engine import async_session_factory
from courseflow.middleware.request_context import user_id_var
from courseflow.models.principal import Principal
from courseflow.repos.store import Store, build_memory_store, build_pg_store
from courseflow.services import token_service
from courseflow.services.enrollment_state import EnrollmentStateMachine
from courseflow.services.grading import AssignmentGradingWorkflow
from courseflow.services.progress_service import ProgressService
from courseflow.services.session_gate import session_gate

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

# Process-wide store used when DATABASE_URL is not set.
memory_store = build_memory_store()


async def get_store() -> AsyncIterator[Store]:
    """Yield the store for this request.

    On PostgreSQL each request gets its own session and transaction,
    committed when the handler returns and rolled back if it raises.
    """
    if async_session_factory is None:
        yield memory_store
        return

    async with async_session_factory() as session:
        try:
            yield build_pg_store(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Validate the bearer token and, for students, the active session.

    Used as a FastAPI dependency on every protected endpoint. A student
    whose credential was superseded by a newer login gets
    SessionInvalidatedError, not a plain 401.
    """
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise _unauthorized("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise _unauthorized("Invalid token") from None

    try:
        user_id = UUID(claims["sub"])
    except ValueError:
        logger.warning("Token with malformed subject rejected")
        raise _unauthorized("Invalid token") from None

    principal = Principal(
        user_id=user_id,
        roles=frozenset(claims.get("roles", [])),
        session_id=claims.get("sid"),
    )
    user_id_var.set(str(user_id))

    if principal.is_student():
        await session_gate.verify(principal.user_id, principal.session_id)

    logger.debug(
        "Token validated for user=%s roles=%s", principal.user_id, principal.roles
    )
    return principal


def get_state_machine(
    store: Annotated[Store, Depends(get_store)],
) -> EnrollmentStateMachine:
    return EnrollmentStateMachine(store)


def get_progress_service(
    store: Annotated[Store, Depends(get_store)],
    state: Annotated[EnrollmentStateMachine, Depends(get_state_machine)],
) -> ProgressService:
    return ProgressService(store, state)


def get_grading(
    store: Annotated[Store, Depends(get_store)],
    state: Annotated[EnrollmentStateMachine, Depends(get_state_machine)],
) -> AssignmentGradingWorkflow:
    return AssignmentGradingWorkflow(store, state)
