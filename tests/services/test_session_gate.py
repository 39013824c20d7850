from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

from courseflow.services.errors import SessionInvalidatedError
from courseflow.services.session_gate import SessionGate
from courseflow.services.session_slots import InMemorySessionSlots


def _gate(ttl_seconds: int = 60) -> SessionGate:
    return SessionGate(InMemorySessionSlots(), ttl_seconds=ttl_seconds)


def test_fresh_session_verifies() -> None:
    gate = _gate()
    user_id = uuid4()

    async def scenario() -> None:
        sid = await gate.open_session(user_id)
        await gate.verify(user_id, sid)

    asyncio.run(scenario())


def test_second_login_supersedes_first() -> None:
    gate = _gate()
    user_id = uuid4()

    async def scenario() -> None:
        first = await gate.open_session(user_id)
        second = await gate.open_session(user_id)
        assert first != second
        await gate.verify(user_id, second)
        with pytest.raises(SessionInvalidatedError, match="another device"):
            await gate.verify(user_id, first)

        third = await gate.open_session(user_id)
        await gate.verify(user_id, third)
        with pytest.raises(SessionInvalidatedError, match="another device"):
            await gate.verify(user_id, second)

    asyncio.run(scenario())


def test_missing_claim_is_rejected() -> None:
    gate = _gate()
    user_id = uuid4()

    async def scenario() -> None:
        await gate.open_session(user_id)
        with pytest.raises(SessionInvalidatedError, match="login again"):
            await gate.verify(user_id, None)

    asyncio.run(scenario())


def test_no_active_session_is_rejected() -> None:
    with pytest.raises(SessionInvalidatedError, match="login again"):
        asyncio.run(_gate().verify(uuid4(), "stale-token"))


def test_expired_slot_is_rejected() -> None:
    gate = _gate(ttl_seconds=-1)
    user_id = uuid4()

    async def scenario() -> None:
        sid = await gate.open_session(user_id)
        await gate.verify(user_id, sid)

    with pytest.raises(SessionInvalidatedError):
        asyncio.run(scenario())


def test_close_session_clears_only_own_session() -> None:
    gate = _gate()
    user_id = uuid4()

    async def scenario() -> None:
        old = await gate.open_session(user_id)
        current = await gate.open_session(user_id)
        # The displaced device logging out must not kill the newer session.
        assert await gate.close_session(user_id, old) is False
        await gate.verify(user_id, current)

        assert await gate.close_session(user_id, current) is True
        with pytest.raises(SessionInvalidatedError):
            await gate.verify(user_id, current)

    asyncio.run(scenario())
