"""
Scoped permission lookup.

A grant row's scope is encoded by its ids:

    site_id   channel_id   scope
    NULL      NULL         application
    set       NULL         site
    set       set          channel

Lookups return the set of tokens granted to any of the given role names.
"""
import logging
from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from ..models.role_permission import RolePermission

logger = logging.getLogger(__name__)


def _scope_filter(site_id: int | None, channel_id: int | None) -> list[ColumnElement[bool]]:
    if channel_id is not None and site_id is None:
        raise ValueError("channel_id requires site_id")
    return [
        RolePermission.site_id.is_(None) if site_id is None else RolePermission.site_id == site_id,
        RolePermission.channel_id.is_(None)
        if channel_id is None
        else RolePermission.channel_id == channel_id,
    ]


class PermissionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _lookup(
        self, roles: Sequence[str], site_id: int | None, channel_id: int | None
    ) -> set[str]:
        if not roles:
            return set()
        result = await self.session.execute(
            select(RolePermission.permission)
            .where(RolePermission.role_name.in_(list(roles)))
            .where(*_scope_filter(site_id, channel_id))
            .distinct()
        )
        return set(result.scalars().all())

    async def _find(
        self,
        role_name: str,
        permission: str,
        site_id: int | None,
        channel_id: int | None,
    ) -> RolePermission | None:
        result = await self.session.execute(
            select(RolePermission)
            .where(RolePermission.role_name == role_name)
            .where(RolePermission.permission == permission)
            .where(*_scope_filter(site_id, channel_id))
        )
        return result.scalar_one_or_none()

    async def get_app_permissions(self, roles: Sequence[str]) -> set[str]:
        return await self._lookup(roles, None, None)

    async def get_site_permissions(self, roles: Sequence[str], site_id: int) -> set[str]:
        return await self._lookup(roles, site_id, None)

    async def get_channel_permissions(
        self, roles: Sequence[str], site_id: int, channel_id: int
    ) -> set[str]:
        return await self._lookup(roles, site_id, channel_id)

    async def list_for_role(self, role_name: str) -> list[RolePermission]:
        result = await self.session.execute(
            select(RolePermission)
            .where(RolePermission.role_name == role_name)
            .order_by(RolePermission.id.asc())
        )
        return list(result.scalars().all())

    async def grant(
        self,
        role_name: str,
        permission: str,
        *,
        site_id: int | None = None,
        channel_id: int | None = None,
    ) -> RolePermission:
        """Grant ``permission`` to ``role_name`` at the given scope. Idempotent.

        A concurrent grant of the same row is resolved by the scope's unique
        index; the loser rolls back and returns the stored row.
        """
        existing = await self._find(role_name, permission, site_id, channel_id)
        if existing is not None:
            return existing

        grant = RolePermission(
            role_name=role_name,
            permission=permission,
            site_id=site_id,
            channel_id=channel_id,
        )
        self.session.add(grant)
        try:
            await self.session.flush()
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            existing = await self._find(role_name, permission, site_id, channel_id)
            if existing is None:
                raise
            return existing
        logger.info(
            "operation=permission action=grant role=%s permission=%s site_id=%s channel_id=%s",
            role_name,
            permission,
            site_id,
            channel_id,
        )
        return grant

    async def revoke(
        self,
        role_name: str,
        permission: str,
        *,
        site_id: int | None = None,
        channel_id: int | None = None,
    ) -> None:
        await self.session.execute(
            delete(RolePermission)
            .where(RolePermission.role_name == role_name)
            .where(RolePermission.permission == permission)
            .where(*_scope_filter(site_id, channel_id))
        )
        await self.session.commit()
        logger.info(
            "operation=permission action=revoke role=%s permission=%s site_id=%s channel_id=%s",
            role_name,
            permission,
            site_id,
            channel_id,
        )
