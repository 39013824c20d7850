"""Login and logout.

Students are subject to the single-session rule: every login opens a new
session (replacing the previous one) and the issued access token carries
its ``sid``. Staff tokens carry no ``sid`` and are never gated.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, ConfigDict

from courseflow.api.dependencies import get_store, require_user
from courseflow.models.principal import Principal
from courseflow.repos.store import Store
from courseflow.services import auth_service, token_service
from courseflow.services.session_gate import session_gate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: str
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/login", response_model=TokenOut)
async def login(
    body: LoginIn,
    store: Annotated[Store, Depends(get_store)],
) -> TokenOut:
    user = await auth_service.authenticate_user(store.users, body.email, body.password)
    if user is None:
        logger.warning("Failed login for email=%s", body.email.strip().lower())
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    sid = await session_gate.open_session(user.id) if user.is_student else None
    token = token_service.create_access_token(
        sub=str(user.id), roles=list(user.roles), sid=sid
    )
    logger.info("Login user=%s roles=%s", user.id, ",".join(user.roles))
    return TokenOut(access_token=token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    principal: Annotated[Principal, Depends(require_user)],
) -> Response:
    if principal.is_student():
        await session_gate.close_session(principal.user_id, principal.session_id)
    logger.info("Logout user=%s", principal.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
