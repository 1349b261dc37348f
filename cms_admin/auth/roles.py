"""
Built-in roles, permission tokens and the role-string formats carried in claims.

Role strings arrive from the authentication layer in three shapes:
- bare name: ``"SuperAdministrator"``
- site first: ``"{site_id}:SiteAdministrator"``
- role first: ``"SiteAdministrator:{site_id}"``

Both scoped shapes are checked by the permission evaluator, in different
checks. Build them through the helpers below so the two stay greppable.
"""
from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    SUPER_ADMINISTRATOR = "SuperAdministrator"
    ADMINISTRATOR = "Administrator"
    SITE_ADMINISTRATOR = "SiteAdministrator"


class AppPermission(str, Enum):
    SITES_ADD = "app_sites_add"
    SITES_MANAGE = "app_sites_manage"
    ADMINISTRATORS = "app_administrators"
    USERS = "app_users"
    SETTINGS = "app_settings"


class SitePermission(str, Enum):
    CONTENT_GROUPS = "site_content_groups"
    CHANNELS = "site_channels"
    TEMPLATES = "site_templates"
    CONFIGURATION = "site_configuration"


class ChannelPermission(str, Enum):
    CONTENT_VIEW = "channel_content_view"
    CONTENT_ADD = "channel_content_add"
    CONTENT_EDIT = "channel_content_edit"
    CONTENT_DELETE = "channel_content_delete"
    CONTENT_CHECK = "channel_content_check"


def site_scoped_role(site_id: int, role: Role | str) -> str:
    """``"{site_id}:{role}"``"""
    name = role.value if isinstance(role, Role) else role
    return f"{site_id}:{name}"


def role_scoped_site(role: Role | str, site_id: int) -> str:
    """``"{role}:{site_id}"``"""
    name = role.value if isinstance(role, Role) else role
    return f"{name}:{site_id}"
