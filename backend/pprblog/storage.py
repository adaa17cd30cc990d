"""SQLAlchemy-backed storage client.

Constructed once at startup and handed to the services that need it. Every
method opens its own transactional scope, so callers never hold a database
session. Returned ORM objects are detached; relationships a caller reads are
loaded eagerly before the scope closes. "Not found" is ``None``; storage
failures propagate as SQLAlchemy exceptions.
"""
from datetime import datetime

from sqlalchemy import delete, func, or_, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import joinedload, selectinload, sessionmaker

from pprblog.database import Base, build_engine, build_session_factory, session_scope, utcnow
from pprblog.models import Comment, Post, User, UserSession


class Storage:
    """Narrow persistence interface used by the session, account and query services."""

    def __init__(self, engine: Engine, session_factory: sessionmaker | None = None):
        self.engine = engine
        self.session_factory = session_factory or build_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "Storage":
        return cls(build_engine(database_url, echo=echo))

    def create_tables(self) -> None:
        # Import all models so they're registered with Base
        from pprblog import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    # Users

    def find_user_by_email(self, email: str) -> User | None:
        with session_scope(self.session_factory) as db:
            return db.scalars(select(User).where(func.lower(User.email) == email.lower())).first()

    def find_user_by_id(self, user_id: int) -> User | None:
        with session_scope(self.session_factory) as db:
            return db.get(User, user_id)

    def insert_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: str = "user",
        bio: str | None = None,
        avatar: str | None = None,
    ) -> User:
        with session_scope(self.session_factory) as db:
            user = User(
                name=name,
                email=email,
                password_hash=password_hash,
                role=role,
                bio=bio,
                avatar=avatar,
            )
            db.add(user)
            db.flush()
            db.refresh(user)
            return user

    def update_user(self, user_id: int, **changes) -> User | None:
        """Apply ``changes`` to a user row; returns the updated user or None if missing."""
        with session_scope(self.session_factory) as db:
            user = db.get(User, user_id)
            if user is None:
                return None
            for field, value in changes.items():
                setattr(user, field, value)
            user.updated_at = utcnow()
            db.flush()
            db.refresh(user)
            return user

    def list_active_users(self) -> list[User]:
        with session_scope(self.session_factory) as db:
            return list(db.scalars(select(User).where(User.is_active.is_(True)).order_by(User.id)))

    def count_posts_by_author(self) -> dict[int, int]:
        """Published post counts keyed by author id."""
        with session_scope(self.session_factory) as db:
            rows = db.execute(
                select(Post.author_id, func.count(Post.id))
                .where(Post.is_published.is_(True))
                .group_by(Post.author_id)
            )
            return {author_id: count for author_id, count in rows}

    # Sessions

    def insert_session(self, session_id: str, user_id: int, expires_at: datetime) -> UserSession:
        with session_scope(self.session_factory) as db:
            session = UserSession(id=session_id, user_id=user_id, expires_at=expires_at)
            db.add(session)
            db.flush()
            db.refresh(session)
            return session

    def find_session_by_id(self, session_id: str) -> UserSession | None:
        """Session row with its owning user loaded."""
        with session_scope(self.session_factory) as db:
            return db.scalars(
                select(UserSession)
                .options(joinedload(UserSession.user))
                .where(UserSession.id == session_id)
            ).first()

    def delete_session(self, session_id: str) -> bool:
        with session_scope(self.session_factory) as db:
            result = db.execute(delete(UserSession).where(UserSession.id == session_id))
            return result.rowcount > 0

    def delete_expired_sessions(self, now: datetime) -> int:
        with session_scope(self.session_factory) as db:
            result = db.execute(delete(UserSession).where(UserSession.expires_at < now))
            return result.rowcount

    # Posts

    def _published_posts(self):
        return (
            select(Post)
            .options(joinedload(Post.author))
            .where(Post.is_published.is_(True))
            .order_by(Post.created_at.desc(), Post.id.desc())
        )

    def find_all_posts(self) -> list[Post]:
        with session_scope(self.session_factory) as db:
            return list(db.scalars(self._published_posts()))

    def find_posts_by_author(self, author_id: int) -> list[Post]:
        with session_scope(self.session_factory) as db:
            return list(db.scalars(self._published_posts().where(Post.author_id == author_id)))

    def search_posts(self, query: str) -> list[Post]:
        """Literal, case-insensitive substring match on title or content."""
        term = query.strip().lower()
        # Wildcards in the query match themselves
        term = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{term}%"
        with session_scope(self.session_factory) as db:
            return list(
                db.scalars(
                    self._published_posts().where(
                        or_(
                            func.lower(Post.title).like(pattern, escape="\\"),
                            func.lower(Post.content).like(pattern, escape="\\"),
                        )
                    )
                )
            )

    def find_post_by_id(self, post_id: int) -> Post | None:
        """Published post with author and comments (and comment authors) loaded."""
        with session_scope(self.session_factory) as db:
            return db.scalars(
                select(Post)
                .options(
                    joinedload(Post.author),
                    selectinload(Post.comments).joinedload(Comment.author),
                )
                .where(Post.id == post_id, Post.is_published.is_(True))
            ).first()

    def insert_post(
        self,
        title: str,
        content: str,
        author_id: int,
        likes: int = 0,
        views: int = 0,
    ) -> Post:
        with session_scope(self.session_factory) as db:
            post = Post(title=title, content=content, author_id=author_id, likes=likes, views=views)
            db.add(post)
            db.flush()
            return db.scalars(
                select(Post)
                .options(joinedload(Post.author))
                .where(Post.id == post.id)
                .execution_options(populate_existing=True)
            ).one()

    def delete_post(self, post_id: int) -> bool:
        with session_scope(self.session_factory) as db:
            post = db.get(Post, post_id)
            if post is None:
                return False
            db.delete(post)
            return True

    def insert_comment(self, post_id: int, author_id: int, content: str) -> Comment:
        with session_scope(self.session_factory) as db:
            comment = Comment(post_id=post_id, author_id=author_id, content=content)
            db.add(comment)
            db.flush()
            return db.scalars(
                select(Comment)
                .options(joinedload(Comment.author))
                .where(Comment.id == comment.id)
                .execution_options(populate_existing=True)
            ).one()

    # Analytics

    def analytics_counts(self) -> dict[str, int]:
        with session_scope(self.session_factory) as db:
            total_users = db.scalar(select(func.count(User.id)).where(User.is_active.is_(True)))
            post_totals = db.execute(
                select(
                    func.count(Post.id),
                    func.coalesce(func.sum(Post.views), 0),
                    func.coalesce(func.sum(Post.likes), 0),
                ).where(Post.is_published.is_(True))
            ).one()
            total_comments = db.scalar(select(func.count(Comment.id)))
        return {
            "total_users": total_users or 0,
            "total_posts": post_totals[0] or 0,
            "total_views": post_totals[1] or 0,
            "total_likes": post_totals[2] or 0,
            "total_comments": total_comments or 0,
        }
