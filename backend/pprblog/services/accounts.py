"""User accounts: signup, credential checks and profile edits."""
import logging

from sqlalchemy.exc import IntegrityError

from pprblog.cache import CacheTags, TaggedCache
from pprblog.config import Settings
from pprblog.errors import DuplicateEmailError, NotFoundError
from pprblog.schemas.user import UserOut
from pprblog.security import hash_password, verify_password
from pprblog.storage import Storage

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, storage: Storage, cache: TaggedCache, settings: Settings):
        self.storage = storage
        self.cache = cache
        self.settings = settings

    def create_user(self, name: str, email: str, password: str, role: str = "user") -> UserOut:
        """Register a new user. Raises DuplicateEmailError if the email is taken."""
        email = email.strip().lower()
        if self.storage.find_user_by_email(email) is not None:
            raise DuplicateEmailError()

        try:
            user = self.storage.insert_user(
                name=name.strip(),
                email=email,
                password_hash=hash_password(password, rounds=self.settings.bcrypt_rounds),
                role=role,
            )
        except IntegrityError as exc:
            # Lost a race with a concurrent signup for the same email
            raise DuplicateEmailError() from exc
        self.cache.invalidate_many([CacheTags.USERS, CacheTags.ANALYTICS])
        logger.info(f"Created user {user.id}")
        return UserOut.model_validate(user)

    def authenticate(self, email: str, password: str) -> UserOut | None:
        """Return the user for valid credentials, else None without saying why."""
        user = self.storage.find_user_by_email(email.strip().lower())
        if user is None or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return UserOut.model_validate(user)

    def update_profile(
        self,
        user_id: int,
        name: str | None = None,
        bio: str | None = None,
        avatar: str | None = None,
    ) -> UserOut:
        changes = {}
        if name is not None:
            changes["name"] = name.strip()
        if bio is not None:
            changes["bio"] = bio
        if avatar is not None:
            changes["avatar"] = avatar

        user = self.storage.update_user(user_id, **changes)
        if user is None:
            raise NotFoundError("User not found")

        # Posts embed author name/avatar, so they go stale too
        self.cache.invalidate_many([CacheTags.USERS, CacheTags.POSTS, CacheTags.USER_POSTS])
        return UserOut.model_validate(user)
