"""Cached blog reads and the writes that invalidate them.

| Cached query      | Tags               | TTL    |
|-------------------|--------------------|--------|
| all posts         | posts              | 5 min  |
| all users         | users              | 10 min |
| user by id        | users              | 5 min  |
| posts by user     | user-posts, posts  | 5 min  |
| post by id        | posts              | 5 min  |
| analytics summary | analytics          | 15 min |

Every cached value is a pydantic model, so no password hash ever lands in the
cache. Storage failures propagate and leave nothing cached.
"""
import logging

from pprblog.cache import CacheTags, TaggedCache
from pprblog.errors import NotFoundError
from pprblog.schemas.analytics import AnalyticsSummary
from pprblog.schemas.post import CommentOut, PostDetail, PostOut
from pprblog.schemas.user import UserListItem, UserOut, UserProfile
from pprblog.storage import Storage

logger = logging.getLogger(__name__)

POSTS_TTL = 5 * 60
USERS_TTL = 10 * 60
USER_BY_ID_TTL = 5 * 60
USER_POSTS_TTL = 5 * 60
POST_BY_ID_TTL = 5 * 60
ANALYTICS_TTL = 15 * 60

# User listings and profiles embed post counts and posts
POST_WRITE_TAGS = [CacheTags.POSTS, CacheTags.USER_POSTS, CacheTags.USERS, CacheTags.ANALYTICS]


class BlogQueries:
    def __init__(self, storage: Storage, cache: TaggedCache):
        self.storage = storage
        self.cache = cache

    # Reads

    def all_posts(self) -> list[PostOut]:
        return self.cache.get(
            "posts",
            [CacheTags.POSTS],
            POSTS_TTL,
            lambda: [PostOut.model_validate(post) for post in self.storage.find_all_posts()],
        )

    def all_users(self) -> list[UserListItem]:
        def compute() -> list[UserListItem]:
            counts = self.storage.count_posts_by_author()
            return [
                UserListItem.model_validate(user).model_copy(update={"posts_count": counts.get(user.id, 0)})
                for user in self.storage.list_active_users()
            ]

        return self.cache.get("users", [CacheTags.USERS], USERS_TTL, compute)

    def user_by_id(self, user_id: int) -> UserProfile | None:
        def compute() -> UserProfile | None:
            user = self.storage.find_user_by_id(user_id)
            if user is None or not user.is_active:
                return None
            posts = [PostOut.model_validate(post) for post in self.storage.find_posts_by_author(user_id)]
            profile = UserOut.model_validate(user).model_dump()
            return UserProfile(**profile, posts=posts, posts_count=len(posts))

        return self.cache.get(("user-by-id", user_id), [CacheTags.USERS], USER_BY_ID_TTL, compute)

    def user_posts(self, user_id: int) -> list[PostOut]:
        return self.cache.get(
            ("user-posts", user_id),
            [CacheTags.USER_POSTS, CacheTags.POSTS],
            USER_POSTS_TTL,
            lambda: [PostOut.model_validate(post) for post in self.storage.find_posts_by_author(user_id)],
        )

    def post_by_id(self, post_id: int) -> PostDetail | None:
        def compute() -> PostDetail | None:
            post = self.storage.find_post_by_id(post_id)
            if post is None:
                return None
            return PostDetail.model_validate(post)

        return self.cache.get(("post-by-id", post_id), [CacheTags.POSTS], POST_BY_ID_TTL, compute)

    def analytics(self) -> AnalyticsSummary:
        return self.cache.get(
            "analytics",
            [CacheTags.ANALYTICS],
            ANALYTICS_TTL,
            lambda: AnalyticsSummary(**self.storage.analytics_counts()),
        )

    def search_posts(self, query: str) -> list[PostOut]:
        """Uncached title/content search; an empty query lists everything."""
        if not query.strip():
            return self.all_posts()
        return [PostOut.model_validate(post) for post in self.storage.search_posts(query)]

    # Writes

    def create_post(self, author_id: int, title: str, content: str) -> PostOut:
        post = self.storage.insert_post(title=title, content=content, author_id=author_id)
        self.cache.invalidate_many(POST_WRITE_TAGS)
        logger.info(f"User {author_id} created post {post.id}")
        return PostOut.model_validate(post)

    def delete_post(self, post_id: int) -> None:
        if not self.storage.delete_post(post_id):
            raise NotFoundError("Post not found")
        self.cache.invalidate_many(POST_WRITE_TAGS)
        logger.info(f"Deleted post {post_id}")

    def add_comment(self, post_id: int, author_id: int, content: str) -> CommentOut:
        if self.storage.find_post_by_id(post_id) is None:
            raise NotFoundError("Post not found")
        comment = self.storage.insert_comment(post_id=post_id, author_id=author_id, content=content)
        self.cache.invalidate_many([CacheTags.POSTS, CacheTags.ANALYTICS])
        return CommentOut.model_validate(comment)
