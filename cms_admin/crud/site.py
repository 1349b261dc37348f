from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.site import Site


class SiteRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, site_id: int) -> Site | None:
        return await self._session.get(Site, site_id)

    async def get_site_id_list(self) -> list[int]:
        result = await self._session.execute(
            select(Site.id).order_by(Site.taxis.desc(), Site.id.asc())
        )
        return list(result.scalars().all())

    async def insert(self, site: Site) -> int:
        self._session.add(site)
        await self._session.flush()
        await self._session.commit()
        return site.id
