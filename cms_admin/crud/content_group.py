"""
Content groups: named groups per site ordered by ``taxis``.

Higher taxis sorts first. Values need not be contiguous; only the relative
order inside a site matters. Moving a group swaps its taxis with the nearest
neighbour above or below it.

INVARIANT: the neighbour lookup and the swap run in one transaction while the
site's lock is held, so concurrent moves in a site cannot produce duplicate
ranks or lose an update.
"""
from __future__ import annotations

import json
import logging

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..infrastructure.cache import DistributedCache
from ..infrastructure.locks import SiteLocks
from ..models.content_group import ContentGroup

logger = logging.getLogger(__name__)

CACHE_NAME = "ContentGroupRepository"


class ContentGroupRepository:
    def __init__(
        self,
        session: AsyncSession,
        cache: DistributedCache,
        locks: SiteLocks,
    ) -> None:
        self._session = session
        self._cache = cache
        self._locks = locks
        self._cache_key = cache.get_key(CACHE_NAME)

    def site_cache_key(self, site_id: int) -> str:
        return self._cache.get_key(CACHE_NAME, site_id)

    async def _invalidate(self, site_id: int) -> None:
        await self._cache.remove(self._cache_key)
        await self._cache.remove(self.site_cache_key(site_id))

    async def _rollback(self, action: str, site_id: int, exc: Exception) -> None:
        logger.error(
            "operation=content_group action=%s site_id=%d error=%s", action, site_id, exc
        )
        await self._session.rollback()

    # Reads

    async def get(self, site_id: int, group_name: str) -> ContentGroup | None:
        result = await self._session.execute(
            select(ContentGroup).where(
                ContentGroup.site_id == site_id,
                ContentGroup.group_name == group_name,
            )
        )
        return result.scalar_one_or_none()

    async def exists(self, site_id: int, group_name: str) -> bool:
        return await self.get(site_id, group_name) is not None

    async def get_max_taxis(self, site_id: int) -> int:
        result = await self._session.execute(
            select(func.max(ContentGroup.taxis)).where(ContentGroup.site_id == site_id)
        )
        return result.scalar() or 0

    async def list_by_site(self, site_id: int) -> list[ContentGroup]:
        result = await self._session.execute(
            select(ContentGroup)
            .where(ContentGroup.site_id == site_id)
            .order_by(
                ContentGroup.taxis.desc(),
                ContentGroup.group_name.asc(),
                ContentGroup.id.asc(),
            )
        )
        return list(result.scalars().all())

    async def get_group_names(self, site_id: int) -> list[str]:
        """Group names of a site in display order, read through the site's cache key."""
        key = self.site_cache_key(site_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return json.loads(cached)

        names = [group.group_name for group in await self.list_by_site(site_id)]
        await self._cache.set(key, json.dumps(names))
        return names

    async def list_all_grouped_by_site(self) -> dict[int, list[ContentGroup]]:
        """All groups keyed by site id, each list ordered taxis desc then name asc."""
        result = await self._session.execute(
            select(ContentGroup).order_by(
                ContentGroup.taxis.desc(),
                ContentGroup.group_name.asc(),
                ContentGroup.id.asc(),
            )
        )
        grouped: dict[int, list[ContentGroup]] = {}
        for group in result.scalars().all():
            grouped.setdefault(group.site_id, []).append(group)
        return grouped

    # Writes

    async def insert(self, group: ContentGroup) -> int:
        """Append ``group`` at the top of its site and return its id."""
        async with self._locks.hold(group.site_id):
            try:
                group.taxis = await self.get_max_taxis(group.site_id) + 1
                self._session.add(group)
                await self._session.flush()
                await self._session.commit()
            except SQLAlchemyError as exc:
                await self._rollback("insert", group.site_id, exc)
                raise

        logger.info(
            "operation=content_group action=insert site_id=%d group_name=%s taxis=%d",
            group.site_id,
            group.group_name,
            group.taxis,
        )
        if group.id > 0:
            await self._invalidate(group.site_id)
        return group.id

    async def update(self, group: ContentGroup) -> bool:
        """Persist ``group`` by id.

        Returns whether a row matched. Both the stored site and the new site
        lose their cached entries, since ``site_id`` may have changed.
        """
        try:
            # Pending edits on ``group`` must not be flushed before the old
            # site is read.
            with self._session.no_autoflush:
                stored_site_id = (
                    await self._session.execute(
                        select(ContentGroup.site_id).where(ContentGroup.id == group.id)
                    )
                ).scalar_one_or_none()
            result = await self._session.execute(
                update(ContentGroup)
                .where(ContentGroup.id == group.id)
                .values(
                    site_id=group.site_id,
                    group_name=group.group_name,
                    taxis=group.taxis,
                    description=group.description,
                )
                .execution_options(synchronize_session="fetch")
            )
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._rollback("update", group.site_id, exc)
            raise

        success = result.rowcount > 0
        if success:
            logger.info(
                "operation=content_group action=update site_id=%d group_id=%d",
                group.site_id,
                group.id,
            )
            await self._invalidate(group.site_id)
            if stored_site_id is not None and stored_site_id != group.site_id:
                await self._cache.remove(self.site_cache_key(stored_site_id))
        return success

    async def delete(self, site_id: int, group_name: str) -> None:
        try:
            await self._session.execute(
                delete(ContentGroup).where(
                    ContentGroup.site_id == site_id,
                    ContentGroup.group_name == group_name,
                )
            )
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._rollback("delete", site_id, exc)
            raise

        logger.info(
            "operation=content_group action=delete site_id=%d group_name=%s",
            site_id,
            group_name,
        )
        await self._invalidate(site_id)

    async def move_up(self, site_id: int, group_name: str) -> bool:
        """Swap taxis with the nearest higher-ranked group of the site.

        Returns whether a swap happened. The cache is invalidated either way.
        """
        async with self._locks.hold(site_id):
            swapped = await self._swap_with_neighbour(site_id, group_name, upward=True)
        await self._invalidate(site_id)
        return swapped

    async def move_down(self, site_id: int, group_name: str) -> bool:
        """Swap taxis with the nearest lower-ranked group of the site."""
        async with self._locks.hold(site_id):
            swapped = await self._swap_with_neighbour(site_id, group_name, upward=False)
        await self._invalidate(site_id)
        return swapped

    async def _swap_with_neighbour(
        self, site_id: int, group_name: str, *, upward: bool
    ) -> bool:
        action = "move_up" if upward else "move_down"
        try:
            target = (
                await self._session.execute(
                    select(ContentGroup)
                    .where(
                        ContentGroup.site_id == site_id,
                        ContentGroup.group_name == group_name,
                    )
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
            ).scalar_one_or_none()
            if target is None:
                await self._session.commit()
                logger.info(
                    "operation=content_group action=%s site_id=%d group_name=%s result=missing",
                    action,
                    site_id,
                    group_name,
                )
                return False

            stmt = select(ContentGroup).where(ContentGroup.site_id == site_id)
            if upward:
                stmt = stmt.where(ContentGroup.taxis > target.taxis).order_by(
                    ContentGroup.taxis.asc(), ContentGroup.id.asc()
                )
            else:
                stmt = stmt.where(ContentGroup.taxis < target.taxis).order_by(
                    ContentGroup.taxis.desc(), ContentGroup.id.asc()
                )
            neighbour = (
                await self._session.execute(
                    stmt.limit(1)
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
            ).scalar_one_or_none()

            if neighbour is None:
                await self._session.commit()
                return False

            target.taxis, neighbour.taxis = neighbour.taxis, target.taxis
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._rollback(action, site_id, exc)
            raise

        logger.info(
            "operation=content_group action=%s site_id=%d group_name=%s neighbour=%s taxis=%d",
            action,
            site_id,
            group_name,
            neighbour.group_name,
            target.taxis,
        )
        return True
