"""Distributed cache used by the repositories.

Repositories only depend on :class:`DistributedCache`. Production wiring uses
:class:`RedisCache`; any object with the same coroutine methods works.
"""
from __future__ import annotations

import logging
from typing import Protocol

from redis.exceptions import RedisError

from .redis import RedisClient

logger = logging.getLogger(__name__)


class DistributedCache(Protocol):
    def get_key(self, *parts: object) -> str:
        ...

    async def get(self, key: str) -> str | None:
        ...

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        ...

    async def remove(self, key: str) -> None:
        ...


class RedisCache:
    """DistributedCache backed by :class:`RedisClient`.

    Keys are namespaced as ``"{prefix}:{part}:{part}..."``.
    """

    def __init__(
        self,
        client: RedisClient,
        *,
        prefix: str = "cms",
        default_ttl_seconds: int | None = None,
    ) -> None:
        self._client = client
        self._prefix = prefix
        self._default_ttl_seconds = default_ttl_seconds

    def get_key(self, *parts: object) -> str:
        return ":".join([self._prefix, *(str(part) for part in parts)])

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get_value(key)
        except RedisError as exc:
            logger.error("operation=cache action=get key=%s error=%s", key, exc)
            raise

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        try:
            await self._client.set_value(
                key, value, ttl_seconds or self._default_ttl_seconds
            )
        except RedisError as exc:
            logger.error("operation=cache action=set key=%s error=%s", key, exc)
            raise

    async def remove(self, key: str) -> None:
        try:
            await self._client.delete_value(key)
        except RedisError as exc:
            logger.error("operation=cache action=remove key=%s error=%s", key, exc)
            raise
        logger.debug("operation=cache action=remove key=%s", key)
