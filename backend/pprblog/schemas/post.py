"""Post and comment schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AuthorSummary(BaseModel):
    """Public author fields embedded in posts and comments."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    avatar: str | None = None


class PostOut(BaseModel):
    """Published post as listed on the site."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    content: str
    author_id: int
    created_at: datetime
    likes: int
    views: int
    author: AuthorSummary | None = None


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content: str
    created_at: datetime
    author: AuthorSummary | None = None


class PostDetail(PostOut):
    """Single post with its comments, newest first."""

    comments: list[CommentOut] = []


class PostCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1)


class DeletePostResponse(BaseModel):
    success: bool = True
    deleted_id: int
