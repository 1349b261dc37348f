"""FastAPI dependency providers for applications that mount this backend.

The host's authentication middleware is expected to place a
:class:`~cms_admin.auth.Principal` on ``request.state.principal``.
"""
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
import logging

from fastapi import Depends, FastAPI, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .auth.principal import Principal
from .config import get_settings
from .crud.content_group import ContentGroupRepository
from .crud.user_menu import UserMenuRepository
from .database import dispose_engine, get_session
from .errors import AuthError
from .infrastructure.cache import DistributedCache, RedisCache
from .infrastructure.locks import RedisSiteLocks, SiteLocks
from .infrastructure.redis import close_redis, get_redis, init_redis
from .log import configure_logging
from .services.user_manager import UserManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    settings = get_settings()
    logger.info("Starting %s", settings.app_name)
    if settings.debug:
        logger.warning("DEBUG=true, do not use in production")

    await init_redis(settings.redis_url)

    yield

    await close_redis()
    await dispose_engine()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def get_cache() -> DistributedCache:
    settings = get_settings()
    return RedisCache(
        get_redis(),
        prefix=settings.cache_key_prefix,
        default_ttl_seconds=settings.cache_ttl_seconds,
    )


def get_site_locks() -> SiteLocks:
    return RedisSiteLocks(
        get_redis(), ttl_seconds=get_settings().taxis_lock_ttl_seconds
    )


def get_content_group_repository(
    db: AsyncSession = Depends(get_db),
    cache: DistributedCache = Depends(get_cache),
    locks: SiteLocks = Depends(get_site_locks),
) -> ContentGroupRepository:
    return ContentGroupRepository(db, cache, locks)


def get_user_menu_repository(
    db: AsyncSession = Depends(get_db),
    cache: DistributedCache = Depends(get_cache),
) -> UserMenuRepository:
    return UserMenuRepository(db, cache)


def get_user_manager(db: AsyncSession = Depends(get_db)) -> UserManager:
    return UserManager(db)


def get_principal(request: Request) -> Principal:
    principal = getattr(request.state, "principal", None)
    if not isinstance(principal, Principal):
        raise AuthError("Not authenticated")
    return principal
