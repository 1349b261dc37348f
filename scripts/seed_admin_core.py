"""
Seed data for built-in roles and application-level grants.
Run once after the initial migration.

Usage:
    python scripts/seed_admin_core.py
"""
import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from cms_admin.auth.roles import AppPermission, Role
from cms_admin.crud.permission import PermissionRepository
from cms_admin.crud.role import RoleRepository
from cms_admin.database import dispose_engine, get_sessionmaker


DEFAULT_ROLES = [
    {
        "name": Role.SUPER_ADMINISTRATOR.value,
        "description": "Full access to every site; bypasses permission lookups",
    },
    {
        "name": Role.ADMINISTRATOR.value,
        "description": "Application administrator with explicit grants",
    },
    {
        "name": Role.SITE_ADMINISTRATOR.value,
        "description": "Issued per site as '{site_id}:SiteAdministrator'",
    },
]

# SuperAdministrator needs no rows: it short-circuits every check.
APP_ROLE_PERMISSIONS = {
    Role.ADMINISTRATOR.value: [
        AppPermission.SITES_MANAGE.value,
        AppPermission.ADMINISTRATORS.value,
        AppPermission.USERS.value,
    ],
}


async def seed_admin_core(session: AsyncSession) -> None:
    role_repo = RoleRepository(session)
    permission_repo = PermissionRepository(session)

    print("Seeding roles...")
    for role_data in DEFAULT_ROLES:
        if await role_repo.get_by_name(role_data["name"]):
            print(f"  Role '{role_data['name']}' already exists, skipping...")
            continue
        await role_repo.create(role_data["name"], role_data["description"])
        print(f"  ✓ Created role: {role_data['name']}")
    await session.commit()

    print("\nGranting application permissions...")
    for role_name, permissions in APP_ROLE_PERMISSIONS.items():
        for permission in permissions:
            await permission_repo.grant(role_name, permission)
        print(f"  ✓ Granted {len(permissions)} permissions to '{role_name}'")


async def main() -> None:
    async with get_sessionmaker()() as session:
        await seed_admin_core(session)
    await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
