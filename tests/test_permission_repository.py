import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from cms_admin.crud.config import ConfigRepository
from cms_admin.crud.permission import PermissionRepository
from cms_admin.crud.role import RoleRepository
from cms_admin.crud.site import SiteRepository
from cms_admin.crud.user import (
    UserRepository,
    format_site_id_collection,
    parse_site_id_collection,
)
from cms_admin.models import RolePermission, Site, User


class TestScopes:
    @pytest.mark.anyio
    async def test_grants_are_isolated_by_scope(self, session):
        repo = PermissionRepository(session)
        await repo.grant("Editor", "app_users")
        await repo.grant("Editor", "site_channels", site_id=7)
        await repo.grant("Editor", "channel_content_add", site_id=7, channel_id=11)

        assert await repo.get_app_permissions(["Editor"]) == {"app_users"}
        assert await repo.get_site_permissions(["Editor"], 7) == {"site_channels"}
        assert await repo.get_site_permissions(["Editor"], 8) == set()
        assert await repo.get_channel_permissions(["Editor"], 7, 11) == {"channel_content_add"}
        assert await repo.get_channel_permissions(["Editor"], 7, 12) == set()

    @pytest.mark.anyio
    async def test_lookup_unions_roles(self, session):
        repo = PermissionRepository(session)
        await repo.grant("Editor", "site_channels", site_id=1)
        await repo.grant("Writer", "site_templates", site_id=1)
        await repo.grant("Writer", "site_channels", site_id=1)

        assert await repo.get_site_permissions(["Editor", "Writer"], 1) == {
            "site_channels",
            "site_templates",
        }
        assert await repo.get_site_permissions(["Nobody"], 1) == set()

    @pytest.mark.anyio
    async def test_empty_roles_short_circuit(self, session):
        repo = PermissionRepository(session)
        await repo.grant("Editor", "app_users")

        assert await repo.get_app_permissions([]) == set()

    @pytest.mark.anyio
    async def test_channel_without_site_rejected(self, session):
        repo = PermissionRepository(session)

        with pytest.raises(ValueError, match="channel_id requires site_id"):
            await repo.grant("Editor", "channel_content_add", channel_id=11)


class TestGrantRevoke:
    @pytest.mark.anyio
    async def test_grant_is_idempotent(self, session):
        repo = PermissionRepository(session)
        first = await repo.grant("Editor", "site_channels", site_id=7)
        second = await repo.grant("Editor", "site_channels", site_id=7)

        assert first.id == second.id
        assert len(await repo.list_for_role("Editor")) == 1

    @pytest.mark.anyio
    async def test_revoke_only_touches_matching_scope(self, session):
        repo = PermissionRepository(session)
        await repo.grant("Editor", "site_channels", site_id=7)
        await repo.grant("Editor", "site_channels", site_id=8)

        await repo.revoke("Editor", "site_channels", site_id=7)

        assert await repo.get_site_permissions(["Editor"], 7) == set()
        assert await repo.get_site_permissions(["Editor"], 8) == {"site_channels"}

    @pytest.mark.anyio
    async def test_unique_scope_constraint(self, session):
        session.add(RolePermission(role_name="Editor", permission="p", site_id=1, channel_id=2))
        await session.commit()

        session.add(RolePermission(role_name="Editor", permission="p", site_id=1, channel_id=2))
        with pytest.raises(IntegrityError):
            await session.commit()
        await session.rollback()

        rows = (await session.execute(select(RolePermission))).scalars().all()
        assert len(rows) == 1

    @pytest.mark.anyio
    @pytest.mark.parametrize("site_id", [None, 3])
    async def test_duplicate_app_and_site_scope_rows_rejected(self, session, site_id):
        session.add(RolePermission(role_name="Editor", permission="p", site_id=site_id))
        await session.commit()

        session.add(RolePermission(role_name="Editor", permission="p", site_id=site_id))
        with pytest.raises(IntegrityError):
            await session.commit()
        await session.rollback()

        session.add(RolePermission(role_name="Editor", permission="p", site_id=4))
        await session.commit()

    @pytest.mark.anyio
    async def test_grant_losing_a_race_returns_stored_row(self, session, monkeypatch):
        stored = RolePermission(role_name="Editor", permission="app_users")
        session.add(stored)
        await session.commit()
        stored_id = stored.id

        repo = PermissionRepository(session)
        find = repo._find
        lookups = []

        async def miss_first_lookup(*args):
            lookups.append(args)
            return None if len(lookups) == 1 else await find(*args)

        monkeypatch.setattr(repo, "_find", miss_first_lookup)

        granted = await repo.grant("Editor", "app_users")

        assert granted.id == stored_id
        assert len(lookups) == 2
        assert len(await repo.list_for_role("Editor")) == 1


class TestRolesAndConfig:
    @pytest.mark.anyio
    async def test_role_create_and_lookup(self, session):
        repo = RoleRepository(session)
        await repo.create("Editor", "Edits content")
        await session.commit()

        role = await repo.get_by_name("Editor")
        assert role is not None
        assert role.description == "Edits content"
        assert [r.name for r in await repo.list_all()] == ["Editor"]

    @pytest.mark.anyio
    async def test_config_defaults_then_upsert(self, session):
        repo = ConfigRepository(session)

        assert (await repo.get_config_info()).is_view_content_only_self is False

        await repo.update_config_info(is_view_content_only_self=True)
        await repo.update_config_info(is_view_content_only_self=True)

        assert (await repo.get_config_info()).is_view_content_only_self is True


class TestSiteIdCollection:
    def test_parse_skips_blank_and_invalid(self):
        assert parse_site_id_collection("1, 3,,x,3 ,7") == [1, 3, 7]
        assert parse_site_id_collection(None) == []
        assert parse_site_id_collection("") == []

    def test_format_dedupes(self):
        assert format_site_id_collection([3, 1, 3]) == "3,1"


class TestLookups:
    @pytest.mark.anyio
    async def test_site_and_user_lookups(self, session):
        site_id = await SiteRepository(session).insert(Site(site_name="Main", site_dir="main"))
        users = UserRepository(session)
        user_id = await users.insert(
            User(user_name="editor", site_id_collection=format_site_id_collection([site_id, 4]))
        )

        assert (await SiteRepository(session).get_by_id(site_id)).site_dir == "main"
        assert (await users.get_by_user_name("editor")).id == user_id
        assert await users.get_by_user_name("nobody") is None
        assert await users.get_site_ids(user_id) == [site_id, 4]
        assert await users.get_site_ids(user_id + 100) == []
