from pydantic import BaseModel, ConfigDict, Field


class UserMenuBase(BaseModel):
    parent_id: int = Field(default=0, ge=0)
    text: str = Field(..., min_length=1, max_length=255)
    link: str | None = Field(default=None, max_length=500)
    icon_class: str | None = Field(default=None, max_length=100)
    target: str | None = Field(default=None, max_length=50)
    taxis: int = 0
    is_disabled: bool = False


class UserMenuCreate(UserMenuBase):
    pass


class UserMenuRead(UserMenuBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
