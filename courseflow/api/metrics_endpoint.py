"""Prometheus scrape endpoint (text exposition format, not JSON).

Besides the HTTP metrics it exposes the engine's own counters, e.g.:

  progress_recomputations_total{trigger="material_deleted"} 42.0
  session_gate_rejections_total{reason="mismatch"} 3.0
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
