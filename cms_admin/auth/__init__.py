from .principal import ANONYMOUS, Principal
from .roles import (
    AppPermission,
    ChannelPermission,
    Role,
    SitePermission,
    role_scoped_site,
    site_scoped_role,
)

__all__ = [
    "ANONYMOUS",
    "AppPermission",
    "ChannelPermission",
    "Principal",
    "Role",
    "SitePermission",
    "role_scoped_site",
    "site_scoped_role",
]
