"""Health and readiness endpoints.

  /health (liveness): the process answers. Always 200; ``status`` says
    whether a backing service is degraded, so a partial outage does not
    get the container restarted.

  /ready (readiness): every configured backing service answers. 503
    takes the instance out of the load balancer until it recovers.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from courseflow.db.engine import engine, ping_database
from courseflow.db.redis import redis_pool

router = APIRouter(tags=["health"])


async def _check_redis() -> str:
    if redis_pool is None:
        return "not_configured"
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except Exception:
        return "degraded"
    return "ok"


async def _check_database() -> str:
    if engine is None:
        return "not_configured"
    try:
        await ping_database()
    except Exception:
        return "degraded"
    return "ok"


async def _checks() -> dict[str, str]:
    return {"redis": await _check_redis(), "database": await _check_database()}


@router.get("/health")
async def health() -> dict:
    checks = await _checks()
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready() -> JSONResponse:
    checks = await _checks()
    if "degraded" in checks.values():
        return JSONResponse(
            status_code=503, content={"status": "not_ready", "checks": checks}
        )
    return JSONResponse(status_code=200, content={"status": "ready", "checks": checks})
