"""Per-site serialization for read-modify-write sequences.

Taxis reordering reads two ranks and writes them back swapped. Two workers
doing that against the same site at once can leave duplicate ranks, so every
reorder and insert runs while holding the site's lock.
"""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import AsyncContextManager, Protocol

from ..errors import ConflictError
from .redis import RedisClient

logger = logging.getLogger(__name__)


class LockTimeoutError(ConflictError):
    code = "LOCK_TIMEOUT"
    message = "Timed out waiting for the site ordering lock"


class SiteLocks(Protocol):
    def hold(self, site_id: int) -> AsyncContextManager[None]:
        ...


class LocalSiteLocks:
    """One ``asyncio.Lock`` per site id, for a single process."""

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}

    def _lock_for(self, site_id: int) -> asyncio.Lock:
        lock = self._locks.get(site_id)
        if lock is None:
            lock = self._locks[site_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, site_id: int) -> AsyncIterator[None]:
        async with self._lock_for(site_id):
            yield


class RedisSiteLocks:
    """Cluster-wide site locks using Redis SET NX EX.

    Acquisition polls every ``retry_interval`` seconds until ``timeout``
    elapses. The TTL bounds how long a crashed holder blocks the site.
    """

    def __init__(
        self,
        client: RedisClient,
        *,
        namespace: str = "content_groups:taxis",
        ttl_seconds: int = 10,
        retry_interval: float = 0.05,
        timeout: float = 5.0,
    ) -> None:
        self._client = client
        self._namespace = namespace
        self._ttl_seconds = ttl_seconds
        self._retry_interval = retry_interval
        self._timeout = timeout

    @asynccontextmanager
    async def hold(self, site_id: int) -> AsyncIterator[None]:
        key = f"{self._namespace}:{site_id}"
        token = uuid.uuid4().hex
        deadline = time.monotonic() + self._timeout

        while not await self._client.try_acquire_lock(key, token, self._ttl_seconds):
            if time.monotonic() >= deadline:
                logger.warning("operation=lock action=timeout key=%s", key)
                raise LockTimeoutError(details={"site_id": site_id})
            await asyncio.sleep(self._retry_interval)

        logger.debug("operation=lock action=acquired key=%s", key)
        try:
            yield
        finally:
            if not await self._client.release_lock(key, token):
                logger.warning("operation=lock action=release_missed key=%s", key)
