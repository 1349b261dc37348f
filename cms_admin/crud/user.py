from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User


def parse_site_id_collection(value: str | None) -> list[int]:
    """Parse ``"1,3,,x,3"`` into ``[1, 3]``.

    Blank and non-integer entries are skipped; duplicates keep their first
    position.
    """
    site_ids: list[int] = []
    for part in (value or "").split(","):
        part = part.strip()
        try:
            site_id = int(part)
        except ValueError:
            continue
        if site_id not in site_ids:
            site_ids.append(site_id)
    return site_ids


def format_site_id_collection(site_ids: Iterable[int]) -> str:
    return ",".join(str(site_id) for site_id in dict.fromkeys(site_ids))


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: int) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_user_name(self, user_name: str) -> User | None:
        result = await self._session.execute(
            select(User).where(User.user_name == user_name)
        )
        return result.scalar_one_or_none()

    async def insert(self, user: User) -> int:
        self._session.add(user)
        await self._session.flush()
        await self._session.commit()
        return user.id

    async def get_site_ids(self, user_id: int) -> list[int]:
        """Site ids stored on the user record; empty for an unknown user."""
        user = await self.get_by_id(user_id)
        if user is None:
            return []
        return parse_site_id_collection(user.site_id_collection)
