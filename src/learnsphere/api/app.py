"""FastAPI application factory for LearnSphere.

Creates the application with:
- Auth, content, admin and search routers under /api
- WebSocket notification transport at /ws
- Lifecycle management for database, cache and the notification fanout
- Consistent error bodies for business-rule failures
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from learnsphere.api.errors import (
    LearnSphereError,
    generic_exception_handler,
    learnsphere_exception_handler,
    validation_exception_handler,
)
from learnsphere.api.middleware import AccessCounterMiddleware, CorrelationMiddleware
from learnsphere.api.routers import admin, auth, content, health, search, websocket
from learnsphere.cache import close_redis, get_redis
from learnsphere.config import settings
from learnsphere.events import NotificationFanout, set_fanout
from learnsphere.observability import configure_logging
from learnsphere.persistence.db import close_db, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup:
    - Configure structured logging
    - Create database tables and the connection pool
    - Create the Redis client
    - Install the notification fanout

    On shutdown, the same in reverse.
    """
    configure_logging(
        json_format=settings.env != "dev",
        level=settings.log_level,
    )

    logger.info(f"Starting LearnSphere ({settings.env})")
    await init_db()
    await get_redis()
    set_fanout(NotificationFanout())
    logger.info("LearnSphere startup complete")

    yield

    logger.info("Shutting down LearnSphere")
    set_fanout(None)
    await close_redis()
    await close_db()
    logger.info("LearnSphere shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="LearnSphere",
        description="Course content platform with live notifications",
        version="0.1.0",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # CorrelationMiddleware is innermost so every other layer logs with its ids
    app.add_middleware(CorrelationMiddleware)
    if settings.enable_access_counter:
        app.add_middleware(AccessCounterMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=settings.cors_origin_list != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(
        LearnSphereError, cast(ExceptionHandler, learnsphere_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast(ExceptionHandler, validation_exception_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(content.router)
    app.include_router(admin.router)
    app.include_router(search.router)
    app.include_router(websocket.router)

    return app
