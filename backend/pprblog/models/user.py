"""User model."""
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship

from pprblog.database import Base, utcnow

USER_ROLES = ("user", "admin")


class User(Base):
    """User account. Deactivated through ``is_active``, never deleted."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    role = Column(String(50), nullable=False, default="user")
    bio = Column(Text)
    avatar = Column(Text)
    joined_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    posts = relationship("Post", back_populates="author")
    comments = relationship("Comment", back_populates="author")
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
