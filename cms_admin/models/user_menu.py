from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class UserMenu(Base):
    __tablename__ = "user_menus"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    parent_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    text: Mapped[str] = mapped_column(String(255), nullable=False)
    link: Mapped[str | None] = mapped_column(String(500))
    icon_class: Mapped[str | None] = mapped_column(String(100))
    target: Mapped[str | None] = mapped_column(String(50))
    taxis: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_disabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
