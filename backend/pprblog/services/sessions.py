"""Session issuing, verification and revocation.

A login produces two things: a ``sessions`` row and a signed token naming it.
A token is honoured only while its signature and ``exp`` claim check out
*and* the row still exists unexpired, so deleting the row (logout) revokes the
token without any blocklist.
"""
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
import uuid

from pprblog.config import Settings
from pprblog.database import utcnow
from pprblog.schemas.user import UserOut
from pprblog.security import TokenClaims, create_session_token, decode_session_token
from pprblog.storage import Storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserLookup:
    """Outcome of resolving a request's session cookie.

    Exactly one of three shapes: authenticated (``user`` set), anonymous
    (neither set) or failed (``error`` set, lookup could not complete).
    """

    user: UserOut | None = None
    error: Exception | None = None

    @classmethod
    def authenticated(cls, user: UserOut) -> "UserLookup":
        return cls(user=user)

    @classmethod
    def anonymous(cls) -> "UserLookup":
        return cls()

    @classmethod
    def failed(cls, error: Exception) -> "UserLookup":
        return cls(error=error)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_failed(self) -> bool:
        return self.error is not None


class SessionManager:
    """Mints, verifies and revokes login sessions."""

    def __init__(
        self,
        storage: Storage,
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.storage = storage
        self.settings = settings
        self.clock = clock

    @property
    def lifetime(self) -> timedelta:
        return timedelta(days=self.settings.session_expire_days)

    def issue(self, user_id: int) -> str:
        """Persist a new session for ``user_id`` and return its signed token."""
        session_id = str(uuid.uuid4())
        # Second precision so the row and the token's exp claim agree exactly
        expires_at = (self.clock() + self.lifetime).replace(microsecond=0)

        self.storage.insert_session(session_id, user_id, expires_at)
        logger.debug(f"Issued session {session_id} for user {user_id}")

        return create_session_token(
            session_id,
            user_id,
            expires_at,
            self.settings.secret_key,
            self.settings.algorithm,
        )

    def verify(self, token: str | None) -> TokenClaims | None:
        """Check signature and expiry; None for anything malformed, tampered or expired."""
        if not token:
            return None
        return decode_session_token(token, self.settings.secret_key, self.settings.algorithm)

    def resolve(self, session_id: str) -> UserOut | None:
        """Return the session owner, or None if the session is gone, expired or orphaned."""
        session = self.storage.find_session_by_id(session_id)
        if session is None:
            return None

        if self.clock() > session.expires_at:
            self.storage.delete_session(session_id)
            logger.info(f"Removed expired session {session_id}")
            return None

        user = session.user
        if user is None or not user.is_active:
            return None
        return UserOut.model_validate(user)

    def revoke(self, session_id: str) -> None:
        """Delete the session row. Revoking an unknown session is not an error."""
        if self.storage.delete_session(session_id):
            logger.debug(f"Revoked session {session_id}")

    def lookup_user(self, token: str | None) -> UserLookup:
        """Resolve a cookie value into a tagged authenticated/anonymous/failed result."""
        try:
            claims = self.verify(token)
            if claims is None:
                return UserLookup.anonymous()
            user = self.resolve(claims.session_id)
        except Exception as exc:
            return UserLookup.failed(exc)

        if user is None or user.id != claims.user_id:
            return UserLookup.anonymous()
        return UserLookup.authenticated(user)

    def current_user(self, token: str | None) -> UserOut | None:
        """The user behind ``token``, or None. Safe to call on every request."""
        lookup = self.lookup_user(token)
        if lookup.is_failed:
            logger.warning("Session lookup failed; treating request as anonymous", exc_info=lookup.error)
        return lookup.user

    def purge_expired(self) -> int:
        """Delete every expired session row."""
        removed = self.storage.delete_expired_sessions(self.clock())
        if removed:
            logger.info(f"Purged {removed} expired sessions")
        return removed
