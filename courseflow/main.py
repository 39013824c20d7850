from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from courseflow.api.assignments import router as assignments_router
from courseflow.api.auth import router as auth_router
from courseflow.api.courses import router as courses_router
from courseflow.api.dependencies import memory_store
from courseflow.api.enrollments import router as enrollments_router
from courseflow.api.errors import register_error_handlers
from courseflow.api.health import router as health_router
from courseflow.api.materials import router as materials_router
from courseflow.api.metrics_endpoint import router as metrics_router
from courseflow.core.config import SETTINGS
from courseflow.core.logging import setup_logging
from courseflow.db.engine import engine, lifespan_db
from courseflow.db.redis import lifespan_redis
from courseflow.middleware.metrics import MetricsMiddleware
from courseflow.middleware.request_context import RequestContextMiddleware
from courseflow.repos.seed import seed_demo_data

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # Nested so teardown runs in reverse order.
    async with lifespan_db():
        async with lifespan_redis():
            if SETTINGS.seed_demo_data and engine is None:
                await seed_demo_data(memory_store)
            yield


app = FastAPI(
    title="courseflow",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext -> Metrics -> CORS -> route.
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

register_error_handlers(app)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(courses_router)
app.include_router(materials_router)
app.include_router(enrollments_router)
app.include_router(assignments_router)

logger.info(
    "courseflow started  env=%s log_level=%s port=%d store=%s sessions=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "postgres" if engine is not None else "memory",
    "redis" if SETTINGS.redis_url else "memory",
)
