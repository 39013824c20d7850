from __future__ import annotations

import hmac
import logging
import secrets
from uuid import UUID

from courseflow.core.config import SETTINGS
from courseflow.core.metrics import SESSION_REJECTIONS
from courseflow.services.errors import SessionInvalidatedError
from courseflow.services.session_slots import SessionSlotStore, session_slots

logger = logging.getLogger(__name__)


class SessionGate:
    """Enforces one active session per student account.

    ``open_session`` is called at login and returns the token to embed in
    the credential; ``verify`` runs on every authenticated student request.
    """

    def __init__(self, slots: SessionSlotStore, *, ttl_seconds: int) -> None:
        self._slots = slots
        self._ttl_seconds = ttl_seconds

    async def open_session(self, user_id: UUID) -> str:
        token = secrets.token_urlsafe(32)
        await self._slots.put(user_id, token, self._ttl_seconds)
        logger.info("Session opened user=%s", user_id)
        return token

    async def verify(self, user_id: UUID, presented: str | None) -> None:
        if not presented:
            SESSION_REJECTIONS.labels("missing_claim").inc()
            raise SessionInvalidatedError("Invalid session. Please login again.")

        active = await self._slots.get(user_id)
        if active is None:
            SESSION_REJECTIONS.labels("no_active_session").inc()
            raise SessionInvalidatedError("Invalid session. Please login again.")

        if not hmac.compare_digest(active, presented):
            SESSION_REJECTIONS.labels("mismatch").inc()
            logger.info("Superseded session rejected user=%s", user_id)
            raise SessionInvalidatedError(
                "Session expired. You have been logged in from another device."
            )

    async def close_session(self, user_id: UUID, presented: str | None) -> bool:
        """Clear the slot, but only if it still holds the caller's session.

        A device that was already displaced must not log out the newer one.
        """
        active = await self._slots.get(user_id)
        if active is None or not presented:
            return False
        if not hmac.compare_digest(active, presented):
            return False
        await self._slots.clear(user_id)
        logger.info("Session closed user=%s", user_id)
        return True


session_gate = SessionGate(session_slots, ttl_seconds=SETTINGS.session_ttl_seconds)
