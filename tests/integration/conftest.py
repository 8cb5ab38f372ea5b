"""Integration test fixtures using Docker.

Runs PostgreSQL and Redis containers once per session. Tests are skipped
when no Docker daemon is reachable.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Iterator
from contextlib import contextmanager
from typing import Any
from urllib.parse import urlparse

import docker
import pytest
import pytest_asyncio
import redis.asyncio as aioredis
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from mylist.config import Settings
from mylist.lists.runtime import ListRuntime, build_runtime
from mylist.persistence.db import init_db, make_session_factory
from mylist.persistence.tables import Base


class ContainerService:
    """A running container plus the host its published ports are reachable on."""

    def __init__(self, container: Any, host: str):
        self.container = container
        self.host = host

    def port(self, container_port: int) -> int:
        self.container.reload()
        bindings = self.container.attrs["NetworkSettings"]["Ports"].get(f"{container_port}/tcp")
        if not bindings:
            raise RuntimeError(f"Port {container_port} not published by {self.container.short_id}")
        return int(bindings[0]["HostPort"])


@contextmanager
def run_container(client: Any, image: str, port: int, env: dict[str, str] | None = None):
    container = client.containers.run(
        image, detach=True, environment=env, ports={f"{port}/tcp": None}
    )
    base_url = client.api.base_url
    host = "localhost"
    if not base_url.startswith(("unix://", "npipe://", "http+docker://")):
        host = urlparse(base_url).hostname or "localhost"
    try:
        yield ContainerService(container, host)
    finally:
        container.remove(force=True, v=True)


@pytest.fixture(scope="session")
def docker_client():
    """Create a Docker client or skip if Docker is unavailable."""
    try:
        client = docker.from_env()
        client.ping()
    except docker.errors.DockerException as exc:
        pytest.skip(f"Docker not available: {exc}")
    yield client
    client.close()


@pytest.fixture(scope="session")
def database_url(docker_client) -> Iterator[str]:
    env = {"POSTGRES_USER": "mylist", "POSTGRES_PASSWORD": "mylist", "POSTGRES_DB": "mylist"}
    with run_container(docker_client, "postgres:16-alpine", 5432, env) as postgres:
        yield f"postgresql+asyncpg://mylist:mylist@{postgres.host}:{postgres.port(5432)}/mylist"


@pytest.fixture(scope="session")
def redis_url(docker_client) -> Iterator[str]:
    with run_container(docker_client, "redis:7-alpine", 6379) as redis_service:
        yield f"redis://{redis_service.host}:{redis_service.port(6379)}/0"


async def _wait_for_engine(engine: AsyncEngine, timeout: float = 30.0) -> None:
    """Wait for the database engine to accept connections."""
    deadline = time.monotonic() + timeout
    while True:
        try:
            async with engine.connect():
                return
        except (SQLAlchemyError, OSError):
            if time.monotonic() >= deadline:
                raise
            await asyncio.sleep(0.5)


async def _wait_for_redis(client: aioredis.Redis, timeout: float = 30.0) -> None:
    """Wait for Redis to accept connections."""
    deadline = time.monotonic() + timeout
    while True:
        try:
            await client.ping()
            return
        except (RedisError, OSError):
            if time.monotonic() >= deadline:
                raise
            await asyncio.sleep(0.5)


@pytest_asyncio.fixture
async def pg_engine(database_url: str) -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(database_url)
    await _wait_for_engine(engine)
    await init_db(engine)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def pg_session_factory(pg_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(pg_engine)


@pytest_asyncio.fixture
async def redis_client(redis_url: str) -> AsyncIterator[aioredis.Redis]:
    client = aioredis.from_url(redis_url, decode_responses=False)
    await _wait_for_redis(client)
    yield client
    await client.flushdb()
    await client.aclose()


@pytest.fixture
def pg_runtime(
    pg_session_factory: async_sessionmaker[AsyncSession],
    redis_client: aioredis.Redis,
    test_settings: Settings,
) -> ListRuntime:
    return build_runtime(pg_session_factory, redis_client, test_settings)
