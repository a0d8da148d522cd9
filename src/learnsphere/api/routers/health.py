"""Health check endpoint.

The database is required; the cache is optional because every cache path
fails open, so a cache outage reports ``degraded`` rather than
``unhealthy``.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from learnsphere.cache import CacheClient, get_redis
from learnsphere.events import get_fanout
from learnsphere.persistence.db import health_check as db_health_check

router = APIRouter(prefix="/api", tags=["health"])

CHECK_TIMEOUT = 5.0


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""

    name: str
    healthy: bool
    latency_ms: float
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "status": "up" if self.healthy else "down",
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            result["message"] = self.message
        return result


async def _timed(name: str, check: Any) -> ComponentHealth:
    start = time.monotonic()
    try:
        healthy = await asyncio.wait_for(check(), timeout=CHECK_TIMEOUT)
        message = None if healthy else f"{name} check failed"
    except asyncio.TimeoutError:
        healthy, message = False, f"{name} check timed out"
    except Exception as e:
        healthy, message = False, str(e)
    return ComponentHealth(
        name=name,
        healthy=bool(healthy),
        latency_ms=(time.monotonic() - start) * 1000,
        message=message,
    )


async def check_database() -> ComponentHealth:
    return await _timed("database", db_health_check)


async def check_cache() -> ComponentHealth:
    async def ping() -> bool:
        return await CacheClient(await get_redis()).health_check()

    return await _timed("cache", ping)


def overall_status(database: ComponentHealth, cache: ComponentHealth) -> HealthStatus:
    if not database.healthy:
        return HealthStatus.UNHEALTHY
    if not cache.healthy:
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY


@router.get("/health")
async def health() -> JSONResponse:
    """Returns 200 unless the database is unreachable (503)."""
    database, cache = await asyncio.gather(check_database(), check_cache())
    status = overall_status(database, cache)
    fanout = get_fanout()
    return JSONResponse(
        status_code=503 if status == HealthStatus.UNHEALTHY else 200,
        content={
            "status": status.value,
            "checks": {database.name: database.to_dict(), cache.name: cache.to_dict()},
            "connections": fanout.connection_count if fanout is not None else 0,
        },
    )
