"""User schemas. None of them carry the password hash."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pprblog.schemas.post import PostOut


class UserOut(BaseModel):
    """User info response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    bio: str | None = None
    avatar: str | None = None
    joined_at: datetime
    updated_at: datetime
    is_active: bool = True

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class UserListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    bio: str | None = None
    avatar: str | None = None
    joined_at: datetime
    posts_count: int = 0


class UserProfile(UserOut):
    """Public profile page: user plus their published posts."""

    posts: list[PostOut] = []
    posts_count: int = 0


class ProfileUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=255)
    bio: str | None = None
    avatar: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value
