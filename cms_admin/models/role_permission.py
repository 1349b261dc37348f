from sqlalchemy import Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

# NULL ids never collide in a plain unique constraint, so the application and
# site scopes each get a partial unique index.
_APP_SCOPE = text("site_id IS NULL AND channel_id IS NULL")
_SITE_SCOPE = text("site_id IS NOT NULL AND channel_id IS NULL")


class RolePermission(Base):
    """A permission token granted to a role name.

    Scope follows the ids: both null is application-wide, only ``site_id`` is
    site-wide, both set is channel-wide.
    """

    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint(
            "role_name",
            "site_id",
            "channel_id",
            "permission",
            name="uq_role_permissions_scope_permission",
        ),
        Index(
            "uq_role_permissions_app_scope",
            "role_name",
            "permission",
            unique=True,
            postgresql_where=_APP_SCOPE,
            sqlite_where=_APP_SCOPE,
        ),
        Index(
            "uq_role_permissions_site_scope",
            "role_name",
            "site_id",
            "permission",
            unique=True,
            postgresql_where=_SITE_SCOPE,
            sqlite_where=_SITE_SCOPE,
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    site_id: Mapped[int | None] = mapped_column(Integer, index=True)
    channel_id: Mapped[int | None] = mapped_column(Integer)
    permission: Mapped[str] = mapped_column(String(100), nullable=False)
