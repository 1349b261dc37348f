from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Site(Base):
    __tablename__ = "sites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    site_name: Mapped[str] = mapped_column(String(255), nullable=False)
    site_dir: Mapped[str | None] = mapped_column(String(255))
    parent_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    taxis: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
