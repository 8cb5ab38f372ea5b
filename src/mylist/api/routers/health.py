"""Health check endpoints.

- /health       - Liveness probe (no dependency checks)
- /health/ready - Readiness probe (checks the durable store and the shared cache)
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from fastapi import APIRouter
from fastapi.responses import ORJSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from mylist.cache.redis import RedisCache, get_redis
from mylist.config import settings
from mylist.persistence.db import health_check as db_health_check

router = APIRouter(tags=["health"])

CHECK_TIMEOUT = 2.0  # seconds


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single dependency."""

    name: str
    status: HealthStatus
    latency_ms: float
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            result["message"] = self.message
        return result


async def _check(name: str, probe: Callable[[], Awaitable[bool]]) -> ComponentHealth:
    start = time.monotonic()
    try:
        healthy = await asyncio.wait_for(probe(), timeout=CHECK_TIMEOUT)
        message = None if healthy else f"{name} check failed"
    except asyncio.TimeoutError:
        healthy, message = False, f"{name} check timed out"
    except (RedisError, SQLAlchemyError, OSError) as e:
        healthy, message = False, str(e)
    latency = (time.monotonic() - start) * 1000
    return ComponentHealth(
        name=name,
        status=HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY,
        latency_ms=latency,
        message=message,
    )


async def check_database() -> ComponentHealth:
    return await _check("database", db_health_check)


async def check_redis() -> ComponentHealth:
    async def probe() -> bool:
        client = await get_redis()
        return await RedisCache(client, timeout=settings.redis_timeout).health_check()

    return await _check("redis", probe)


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe. Returns OK while the process is serving requests."""
    return {"status": "OK", "timestamp": datetime.now(UTC).isoformat()}


@router.get("/health/ready")
async def ready() -> ORJSONResponse:
    """Readiness probe.

    Returns 200 when the store and the shared cache both answer within
    ``CHECK_TIMEOUT``, 503 otherwise.
    """
    components = await asyncio.gather(check_database(), check_redis())
    all_healthy = all(c.status == HealthStatus.HEALTHY for c in components)
    overall = HealthStatus.HEALTHY if all_healthy else HealthStatus.UNHEALTHY
    return ORJSONResponse(
        content={
            "status": overall.value,
            "components": [c.to_dict() for c in components],
        },
        status_code=200 if all_healthy else 503,
    )
