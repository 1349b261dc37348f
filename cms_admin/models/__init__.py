from .base import Base
from .config_info import ConfigInfo
from .content_group import ContentGroup
from .role import Role
from .role_permission import RolePermission
from .site import Site
from .user import User
from .user_menu import UserMenu

__all__ = [
    "Base",
    "ConfigInfo",
    "ContentGroup",
    "Role",
    "RolePermission",
    "Site",
    "User",
    "UserMenu",
]
