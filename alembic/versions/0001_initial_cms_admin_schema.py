"""Initial CMS admin schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

Tables:
- sites
- users
- roles
- role_permissions (scoped grants: app / site / channel)
- configs
- content_groups (UNIQUE site_id + group_name)
- user_menus
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str | None = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Apply schema changes."""
    op.create_table(
        "sites",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("site_name", sa.String(255), nullable=False),
        sa.Column("site_dir", sa.String(255), nullable=True),
        sa.Column("parent_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("taxis", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_name", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("site_id_collection", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_users_user_name", "users", ["user_name"], unique=True)

    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_roles_name", "roles", ["name"], unique=True)

    op.create_table(
        "role_permissions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("role_name", sa.String(100), nullable=False),
        sa.Column("site_id", sa.Integer(), nullable=True),
        sa.Column("channel_id", sa.Integer(), nullable=True),
        sa.Column("permission", sa.String(100), nullable=False),
        sa.UniqueConstraint(
            "role_name",
            "site_id",
            "channel_id",
            "permission",
            name="uq_role_permissions_scope_permission",
        ),
    )
    op.create_index("ix_role_permissions_role_name", "role_permissions", ["role_name"])
    op.create_index("ix_role_permissions_site_id", "role_permissions", ["site_id"])
    op.create_index(
        "uq_role_permissions_app_scope",
        "role_permissions",
        ["role_name", "permission"],
        unique=True,
        postgresql_where=sa.text("site_id IS NULL AND channel_id IS NULL"),
        sqlite_where=sa.text("site_id IS NULL AND channel_id IS NULL"),
    )
    op.create_index(
        "uq_role_permissions_site_scope",
        "role_permissions",
        ["role_name", "site_id", "permission"],
        unique=True,
        postgresql_where=sa.text("site_id IS NOT NULL AND channel_id IS NULL"),
        sqlite_where=sa.text("site_id IS NOT NULL AND channel_id IS NULL"),
    )

    op.create_table(
        "configs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "is_view_content_only_self",
            sa.Boolean(),
            nullable=False,
            server_default="false",
        ),
    )

    op.create_table(
        "content_groups",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("site_id", sa.Integer(), nullable=False),
        sa.Column("group_name", sa.String(255), nullable=False),
        sa.Column("taxis", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.UniqueConstraint(
            "site_id", "group_name", name="uq_content_groups_site_id_group_name"
        ),
    )
    op.create_index("ix_content_groups_site_id", "content_groups", ["site_id"])

    op.create_table(
        "user_menus",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("parent_id", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("text", sa.String(255), nullable=False),
        sa.Column("link", sa.String(500), nullable=True),
        sa.Column("icon_class", sa.String(100), nullable=True),
        sa.Column("target", sa.String(50), nullable=True),
        sa.Column("taxis", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "is_disabled", sa.Boolean(), nullable=False, server_default="false"
        ),
    )


def downgrade() -> None:
    """Revert schema changes."""
    op.drop_table("user_menus")
    op.drop_index("ix_content_groups_site_id", table_name="content_groups")
    op.drop_table("content_groups")
    op.drop_table("configs")
    op.drop_index("uq_role_permissions_site_scope", table_name="role_permissions")
    op.drop_index("uq_role_permissions_app_scope", table_name="role_permissions")
    op.drop_index("ix_role_permissions_site_id", table_name="role_permissions")
    op.drop_index("ix_role_permissions_role_name", table_name="role_permissions")
    op.drop_table("role_permissions")
    op.drop_index("ix_roles_name", table_name="roles")
    op.drop_table("roles")
    op.drop_index("ix_users_user_name", table_name="users")
    op.drop_table("users")
    op.drop_table("sites")
