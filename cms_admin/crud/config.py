import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.config_info import ConfigInfo

logger = logging.getLogger(__name__)


class ConfigRepository:
    """Access to the single global config row."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _get_row(self) -> ConfigInfo | None:
        result = await self._session.execute(
            select(ConfigInfo).order_by(ConfigInfo.id.asc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_config_info(self) -> ConfigInfo:
        """Return the stored config, or unsaved defaults when none exists yet."""
        config_info = await self._get_row()
        if config_info is None:
            return ConfigInfo(is_view_content_only_self=False)
        return config_info

    async def update_config_info(self, *, is_view_content_only_self: bool) -> ConfigInfo:
        config_info = await self._get_row()
        if config_info is None:
            config_info = ConfigInfo(is_view_content_only_self=is_view_content_only_self)
            self._session.add(config_info)
        else:
            config_info.is_view_content_only_self = is_view_content_only_self
        await self._session.flush()
        await self._session.commit()
        logger.info(
            "operation=config action=update is_view_content_only_self=%s",
            is_view_content_only_self,
        )
        return config_info
