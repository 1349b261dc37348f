"""
User menus with a read-through cache.

The whole menu list is cached as one JSON document; any write drops it.
"""
import logging

from pydantic import TypeAdapter
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..infrastructure.cache import DistributedCache
from ..models.user_menu import UserMenu
from ..schemas.user_menu import UserMenuCreate, UserMenuRead

logger = logging.getLogger(__name__)

CACHE_NAME = "UserMenuRepository"

_menu_list_adapter = TypeAdapter(list[UserMenuRead])


class UserMenuRepository:
    def __init__(self, session: AsyncSession, cache: DistributedCache) -> None:
        self._session = session
        self._cache = cache
        self._cache_key = cache.get_key(CACHE_NAME)

    async def get_all_user_menus(self) -> list[UserMenuRead]:
        cached = await self._cache.get(self._cache_key)
        if cached is not None:
            return _menu_list_adapter.validate_json(cached)

        result = await self._session.execute(
            select(UserMenu).order_by(UserMenu.taxis.asc(), UserMenu.id.asc())
        )
        menus = [UserMenuRead.model_validate(menu) for menu in result.scalars().all()]
        await self._cache.set(
            self._cache_key, _menu_list_adapter.dump_json(menus).decode("utf-8")
        )
        return menus

    async def get_user_menu_info(self, menu_id: int) -> UserMenuRead | None:
        for menu in await self.get_all_user_menus():
            if menu.id == menu_id:
                return menu
        return None

    async def insert(self, data: UserMenuCreate) -> int:
        menu = UserMenu(**data.model_dump())
        self._session.add(menu)
        await self._session.flush()
        await self._session.commit()
        logger.info("operation=user_menu action=insert menu_id=%d", menu.id)
        await self._cache.remove(self._cache_key)
        return menu.id

    async def update(self, menu_id: int, data: UserMenuCreate) -> bool:
        menu = await self._session.get(UserMenu, menu_id)
        if menu is None:
            return False
        for field, value in data.model_dump().items():
            setattr(menu, field, value)
        await self._session.commit()
        logger.info("operation=user_menu action=update menu_id=%d", menu_id)
        await self._cache.remove(self._cache_key)
        return True

    async def delete(self, menu_id: int) -> None:
        await self._session.execute(delete(UserMenu).where(UserMenu.id == menu_id))
        await self._session.commit()
        logger.info("operation=user_menu action=delete menu_id=%d", menu_id)
        await self._cache.remove(self._cache_key)
