"""Tests for the shared (Redis) cache tier."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from mylist.cache.keys import CacheKeys
from mylist.cache.redis import RedisCache
from mylist.core.errors import DependencyUnavailableError
from mylist.core.model import CachedPage


def _page(total: int = 0) -> CachedPage:
    return CachedPage.build(items=[], total=total, page=1, page_size=20)


class TestRedisCachePages:
    """Test page storage."""

    @pytest.mark.asyncio
    async def test_set_then_get_page(self, fake_redis) -> None:
        cache = RedisCache(fake_redis, ttl=300)
        key = CacheKeys.page("u1", 1, 20)
        await cache.set_page(key, _page(total=7))

        loaded = await cache.get_page(key)
        assert loaded == _page(total=7)
        assert await fake_redis.ttl(key) == 300

    @pytest.mark.asyncio
    async def test_stored_payload_uses_wire_names(self, fake_redis) -> None:
        cache = RedisCache(fake_redis)
        key = CacheKeys.page("u1", 1, 20)
        await cache.set_page(key, _page())
        assert b'"totalPages":0' in fake_redis.data[key]

    @pytest.mark.asyncio
    async def test_miss_returns_none(self, fake_redis) -> None:
        assert await RedisCache(fake_redis).get_page("mylist:x:v2:1:20") is None

    @pytest.mark.asyncio
    async def test_unreadable_entry_is_a_miss(self, fake_redis) -> None:
        await fake_redis.set("mylist:x:v2:1:20", b'{"legacy": true}')
        assert await RedisCache(fake_redis).get_page("mylist:x:v2:1:20") is None

    @pytest.mark.asyncio
    async def test_entry_expires(self, fake_redis) -> None:
        cache = RedisCache(fake_redis, ttl=10)
        await cache.set_page("k", _page())
        fake_redis.advance(11)
        assert await cache.get_page("k") is None


class TestRedisCacheFailures:
    """Failures surface as DependencyUnavailableError."""

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        client = AsyncMock()
        client.get.side_effect = RedisConnectionError("refused")
        with pytest.raises(DependencyUnavailableError) as exc_info:
            await RedisCache(client).get_page("k")
        assert exc_info.value.component == "shared_cache"

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        async def slow_get(key: str) -> bytes:
            await asyncio.sleep(1)
            return b""

        client = AsyncMock()
        client.get.side_effect = slow_get
        with pytest.raises(DependencyUnavailableError, match="timed out"):
            await RedisCache(client, timeout=0.01).get_page("k")

    @pytest.mark.asyncio
    async def test_health_check(self, fake_redis) -> None:
        assert await RedisCache(fake_redis).health_check() is True

        client = AsyncMock()
        client.ping.side_effect = OSError("unreachable")
        assert await RedisCache(client).health_check() is False


class TestDeletePattern:
    """SCAN-driven deletion in bounded batches."""

    @pytest.mark.asyncio
    async def test_deletes_only_matching_owner(self, fake_redis) -> None:
        cache = RedisCache(fake_redis)
        for page in range(1, 4):
            await cache.set_page(CacheKeys.page("u1", page, 20), _page())
        await cache.set_page(CacheKeys.page("u1", 1, 20, version="v1"), _page())
        other = CacheKeys.page("u2", 1, 20)
        await cache.set_page(other, _page())

        deleted = await cache.delete_pattern(CacheKeys.owner_pattern("u1"))

        assert deleted == 4
        assert list(fake_redis.data) == [other]

    @pytest.mark.asyncio
    async def test_resumes_scan_and_batches_deletes(self, fake_redis) -> None:
        cache = RedisCache(fake_redis, scan_count=7, batch_size=10)
        for page in range(1, 26):
            await cache.set_page(CacheKeys.page("u1", page, 20), _page())

        deleted = await cache.delete_pattern(CacheKeys.owner_pattern("u1"))

        assert deleted == 25
        assert fake_redis.scan_calls > 1
        assert max(fake_redis.delete_calls) <= 10
        assert fake_redis.data == {}

    @pytest.mark.asyncio
    async def test_no_matches(self, fake_redis) -> None:
        assert await RedisCache(fake_redis).delete_pattern("mylist:nobody:*") == 0
        assert fake_redis.delete_calls == []
