from sqlalchemy import Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ContentGroup(Base):
    __tablename__ = "content_groups"
    __table_args__ = (
        UniqueConstraint("site_id", "group_name", name="uq_content_groups_site_id_group_name"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    site_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    group_name: Mapped[str] = mapped_column(String(255), nullable=False)
    taxis: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str | None] = mapped_column(Text)

    def __repr__(self) -> str:
        return (
            f"ContentGroup(site_id={self.site_id!r}, group_name={self.group_name!r}, "
            f"taxis={self.taxis!r})"
        )
