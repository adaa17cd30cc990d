"""SQLAlchemy models package."""
from pprblog.models.user import USER_ROLES, User
from pprblog.models.post import Comment, Post
from pprblog.models.auth import UserSession

__all__ = [
    "USER_ROLES",
    "User",
    "Post",
    "Comment",
    "UserSession",
]
