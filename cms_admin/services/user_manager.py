import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.principal import Principal
from ..auth.roles import ChannelPermission, Role, role_scoped_site, site_scoped_role
from ..crud.config import ConfigRepository
from ..crud.permission import PermissionRepository
from ..crud.site import SiteRepository
from ..crud.user import UserRepository
from ..errors import PermissionError

logger = logging.getLogger(__name__)


class UserManager:
    """Evaluates application-, site- and channel-scoped permissions.

    Every check takes the caller's :class:`Principal` explicitly and
    re-resolves grants from storage on each call; nothing is cached between
    calls.

    Site administrator roles are matched in two literal shapes:
    ``"{site_id}:SiteAdministrator"`` by ``is_site_administrator``,
    ``has_site_permissions(p, site_id)`` and ``has_channel_permissions``, and
    ``"SiteAdministrator:{site_id}"`` by ``has_site_permissions`` when
    specific permissions are requested. Both are honoured as issued by the
    authentication layer.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.permission_repo = PermissionRepository(session)
        self.site_repo = SiteRepository(session)
        self.user_repo = UserRepository(session)
        self.config_repo = ConfigRepository(session)

    # Roles

    def is_administrator(self, principal: Principal) -> bool:
        return principal.is_in_role(Role.ADMINISTRATOR)

    def is_super_administrator(self, principal: Principal) -> bool:
        return principal.is_in_role(Role.SUPER_ADMINISTRATOR)

    def is_site_administrator(self, principal: Principal, site_id: int) -> bool:
        if self.is_super_administrator(principal):
            return True
        return principal.is_in_role(site_scoped_role(site_id, Role.SITE_ADMINISTRATOR))

    def get_roles(self, principal: Principal) -> list[str]:
        """Non-blank roles of the principal, de-duplicated in claim order."""
        roles: list[str] = []
        for role in principal.roles:
            if role and role.strip() and role not in roles:
                roles.append(role)
        return roles

    # Permission checks

    async def has_app_permissions(self, principal: Principal, *permissions: str) -> bool:
        """Check application-wide permissions.

        Args:
            principal: The caller
            *permissions: Tokens to check; any match is enough

        Returns:
            True for a super administrator, otherwise whether any requested
            token is granted to one of the caller's roles
        """
        if self.is_super_administrator(principal):
            return True

        app_permissions = await self.permission_repo.get_app_permissions(
            self.get_roles(principal)
        )
        return any(permission in app_permissions for permission in permissions)

    async def has_site_permissions(
        self, principal: Principal, site_id: int, *permissions: str
    ) -> bool:
        """Check site-wide permissions.

        With no ``permissions`` this is an "any access to the site" check: it
        is True when the caller holds at least one site-scoped grant.

        Args:
            principal: The caller
            site_id: Site to check
            *permissions: Tokens to check; any match is enough

        Returns:
            bool: Whether access is granted
        """
        if self.is_super_administrator(principal):
            return True

        if not permissions:
            if principal.is_in_role(site_scoped_role(site_id, Role.SITE_ADMINISTRATOR)):
                return True
            site_permissions = await self.permission_repo.get_site_permissions(
                self.get_roles(principal), site_id
            )
            return len(site_permissions) > 0

        if principal.is_in_role(role_scoped_site(Role.SITE_ADMINISTRATOR, site_id)):
            return True

        site_permissions = await self.permission_repo.get_site_permissions(
            self.get_roles(principal), site_id
        )
        return any(permission in site_permissions for permission in permissions)

    async def has_any_site_permissions(self, principal: Principal) -> bool:
        """True when the caller has any access to at least one stored site."""
        if self.is_super_administrator(principal):
            return True

        for site_id in await self.site_repo.get_site_id_list():
            if await self.has_site_permissions(principal, site_id):
                return True
        return False

    async def has_channel_permissions(
        self, principal: Principal, site_id: int, channel_id: int, *permissions: str
    ) -> bool:
        if self.is_super_administrator(principal):
            return True

        if principal.is_in_role(site_scoped_role(site_id, Role.SITE_ADMINISTRATOR)):
            return True

        channel_permissions = await self.permission_repo.get_channel_permissions(
            self.get_roles(principal), site_id, channel_id
        )
        return any(permission in channel_permissions for permission in permissions)

    # Derived lookups

    async def get_site_ids(self, principal: Principal) -> list[int]:
        """Site ids visible to the caller.

        Returns:
            All site ids for a super administrator; the de-duplicated ids
            stored on the caller's user record when the caller has any site
            access; otherwise an empty list
        """
        if self.is_super_administrator(principal):
            return await self.site_repo.get_site_id_list()

        if await self.has_any_site_permissions(principal):
            if principal.user_id is None:
                return []
            return await self.user_repo.get_site_ids(principal.user_id)

        return []

    async def get_only_admin_id(
        self, principal: Principal, site_id: int, channel_id: int
    ) -> int | None:
        """User id to restrict visible content to, or None for no restriction.

        A restriction applies only when the global ``is_view_content_only_self``
        flag is on and the caller is neither super administrator, site
        administrator, nor allowed to check content in the channel.
        """
        config_info = await self.config_repo.get_config_info()

        if (
            not config_info.is_view_content_only_self
            or self.is_super_administrator(principal)
            or self.is_site_administrator(principal, site_id)
            or await self.has_channel_permissions(
                principal, site_id, channel_id, ChannelPermission.CONTENT_CHECK.value
            )
        ):
            return None
        return principal.user_id

    # Enforcement

    def _deny(self, principal: Principal, scope: str, permissions: tuple[str, ...]) -> None:
        logger.warning(
            "operation=permission action=deny user_id=%s scope=%s permissions=%s",
            principal.user_id,
            scope,
            ",".join(permissions),
        )
        raise PermissionError(
            f"Permission denied: {' or '.join(permissions) or scope} required",
            details={"scope": scope, "permissions": list(permissions)},
        )

    async def require_app_permissions(self, principal: Principal, *permissions: str) -> None:
        """Raise :class:`PermissionError` unless ``has_app_permissions`` passes."""
        if not await self.has_app_permissions(principal, *permissions):
            self._deny(principal, "app", permissions)

    async def require_site_permissions(
        self, principal: Principal, site_id: int, *permissions: str
    ) -> None:
        if not await self.has_site_permissions(principal, site_id, *permissions):
            self._deny(principal, f"site:{site_id}", permissions)

    async def require_channel_permissions(
        self, principal: Principal, site_id: int, channel_id: int, *permissions: str
    ) -> None:
        if not await self.has_channel_permissions(
            principal, site_id, channel_id, *permissions
        ):
            self._deny(principal, f"channel:{site_id}:{channel_id}", permissions)
