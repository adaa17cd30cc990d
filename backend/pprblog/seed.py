"""Load demo users, posts and comments from YAML into the database.

Run directly with ``python -m pprblog.seed``; the app also calls it at startup
when ``SEED_DEMO_DATA`` is set.
"""
import logging
from pathlib import Path

import yaml

from pprblog.security import DEFAULT_BCRYPT_ROUNDS, hash_password
from pprblog.storage import Storage

logger = logging.getLogger(__name__)


def load_seed_file(path: Path) -> dict:
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def seed_demo_data(storage: Storage, seed_file: Path, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> bool:
    """Insert the demo dataset unless its first user already exists.

    Returns True if anything was inserted.
    """
    if not seed_file.exists():
        logger.warning(f"Seed file not found: {seed_file}")
        return False

    data = load_seed_file(seed_file)
    users = data.get("users", [])
    if not users:
        logger.warning(f"Seed file has no users: {seed_file}")
        return False

    if storage.find_user_by_email(users[0]["email"]) is not None:
        logger.info("Demo data already present, skipping seed")
        return False

    password_hash = hash_password(str(data.get("password", "password123")), rounds=rounds)

    user_ids = {}
    for entry in users:
        user = storage.insert_user(
            name=entry["name"],
            email=entry["email"].lower(),
            password_hash=password_hash,
            role=entry.get("role", "user"),
            bio=entry.get("bio"),
            avatar=entry.get("avatar"),
        )
        user_ids[entry["key"]] = user.id

    post_ids = {}
    for entry in data.get("posts", []):
        post = storage.insert_post(
            title=entry["title"],
            content=entry["content"],
            author_id=user_ids[entry["author"]],
            likes=entry.get("likes", 0),
            views=entry.get("views", 0),
        )
        post_ids[entry["key"]] = post.id

    comments = data.get("comments", [])
    for entry in comments:
        storage.insert_comment(
            post_id=post_ids[entry["post"]],
            author_id=user_ids[entry["author"]],
            content=entry["content"],
        )

    logger.info(f"Seeded {len(user_ids)} users, {len(post_ids)} posts, {len(comments)} comments")
    return True


def main() -> None:
    from pprblog.config import get_settings

    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    storage = Storage.from_url(settings.database_url, echo=settings.debug)
    try:
        storage.create_tables()
        if seed_demo_data(storage, settings.seed_file, rounds=settings.bcrypt_rounds):
            logger.info("Demo credentials: demo@example.com / password123")
    finally:
        storage.dispose()


if __name__ == "__main__":
    main()
