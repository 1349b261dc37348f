"""Tests for the Redis-backed cache and the per-site ordering locks."""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from cms_admin.errors import ConflictError
from cms_admin.infrastructure.cache import RedisCache
from cms_admin.infrastructure.locks import LocalSiteLocks, LockTimeoutError, RedisSiteLocks


def mock_client() -> MagicMock:
    client = MagicMock()
    client.get_value = AsyncMock(return_value=None)
    client.set_value = AsyncMock()
    client.delete_value = AsyncMock()
    client.try_acquire_lock = AsyncMock(return_value=True)
    client.release_lock = AsyncMock(return_value=True)
    return client


class TestRedisCache:
    def test_keys_are_prefixed(self):
        cache = RedisCache(mock_client(), prefix="cms")

        assert cache.get_key("ContentGroupRepository") == "cms:ContentGroupRepository"
        assert cache.get_key("ContentGroupRepository", 7) == "cms:ContentGroupRepository:7"

    @pytest.mark.anyio
    async def test_set_uses_default_ttl(self):
        client = mock_client()
        cache = RedisCache(client, default_ttl_seconds=3600)

        await cache.set("k", "v")
        await cache.set("k", "v", ttl_seconds=5)

        client.set_value.assert_any_await("k", "v", 3600)
        client.set_value.assert_any_await("k", "v", 5)

    @pytest.mark.anyio
    async def test_get_and_remove_delegate(self):
        client = mock_client()
        client.get_value.return_value = '["A"]'
        cache = RedisCache(client)

        assert await cache.get("k") == '["A"]'
        await cache.remove("k")
        client.delete_value.assert_awaited_once_with("k")

    @pytest.mark.anyio
    async def test_redis_errors_propagate(self):
        client = mock_client()
        client.delete_value.side_effect = RedisConnectionError("down")
        cache = RedisCache(client)

        with pytest.raises(RedisConnectionError):
            await cache.remove("k")


class TestLocalSiteLocks:
    @pytest.mark.anyio
    async def test_same_site_is_serialized(self):
        locks = LocalSiteLocks()
        events: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold(7):
                events.append(f"{name}:enter")
                await asyncio.sleep(0.01)
                events.append(f"{name}:exit")

        await asyncio.gather(worker("a"), worker("b"))

        assert events in (
            ["a:enter", "a:exit", "b:enter", "b:exit"],
            ["b:enter", "b:exit", "a:enter", "a:exit"],
        )

    @pytest.mark.anyio
    async def test_different_sites_do_not_block(self):
        locks = LocalSiteLocks()

        async with locks.hold(1):
            await asyncio.wait_for(self._enter(locks, 2), timeout=1)

    @staticmethod
    async def _enter(locks: LocalSiteLocks, site_id: int) -> None:
        async with locks.hold(site_id):
            pass


class TestRedisSiteLocks:
    @pytest.mark.anyio
    async def test_retries_until_acquired_and_releases_with_token(self):
        client = mock_client()
        client.try_acquire_lock.side_effect = [False, False, True]
        locks = RedisSiteLocks(client, ttl_seconds=10, retry_interval=0.001, timeout=1)

        async with locks.hold(7):
            pass

        assert client.try_acquire_lock.await_count == 3
        key, token, ttl = client.try_acquire_lock.await_args.args
        assert key == "content_groups:taxis:7"
        assert ttl == 10
        client.release_lock.assert_awaited_once_with(key, token)

    @pytest.mark.anyio
    async def test_timeout_raises_conflict(self):
        client = mock_client()
        client.try_acquire_lock.return_value = False
        locks = RedisSiteLocks(client, retry_interval=0.001, timeout=0.01)

        with pytest.raises(LockTimeoutError) as exc_info:
            async with locks.hold(7):
                pass

        assert isinstance(exc_info.value, ConflictError)
        assert exc_info.value.status_code == 409
        assert exc_info.value.details == {"site_id": 7}
        client.release_lock.assert_not_called()

    @pytest.mark.anyio
    async def test_released_when_body_raises(self):
        client = mock_client()
        locks = RedisSiteLocks(client)

        with pytest.raises(RuntimeError):
            async with locks.hold(3):
                raise RuntimeError("boom")

        client.release_lock.assert_awaited_once()
