from .config import ConfigRepository
from .content_group import ContentGroupRepository
from .permission import PermissionRepository
from .role import RoleRepository
from .site import SiteRepository
from .user import UserRepository
from .user_menu import UserMenuRepository

__all__ = [
    "ConfigRepository",
    "ContentGroupRepository",
    "PermissionRepository",
    "RoleRepository",
    "SiteRepository",
    "UserRepository",
    "UserMenuRepository",
]
