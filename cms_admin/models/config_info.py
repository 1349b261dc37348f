from sqlalchemy import Boolean, Integer
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ConfigInfo(Base):
    __tablename__ = "configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    is_view_content_only_self: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="false"
    )
