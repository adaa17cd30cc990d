"""Password hashing and session token signing."""
from dataclasses import dataclass
from datetime import datetime
import logging

import bcrypt
from jose import JWTError, jwt

logger = logging.getLogger(__name__)

DEFAULT_BCRYPT_ROUNDS = 12


@dataclass(frozen=True)
class TokenClaims:
    """Identifiers carried inside a verified session token."""

    session_id: str
    user_id: int


def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Hash a password."""
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=rounds),
    ).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"),
            hashed_password.encode("utf-8"),
        )
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_session_token(
    session_id: str,
    user_id: int,
    expires_at: datetime,
    secret_key: str,
    algorithm: str = "HS256",
) -> str:
    """Sign a JWT naming the session and its owner, expiring with the session row."""
    to_encode = {"sessionId": session_id, "userId": user_id, "exp": expires_at}
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


def decode_session_token(token: str, secret_key: str, algorithm: str = "HS256") -> TokenClaims | None:
    """Return the token's claims, or None if it is malformed, tampered or expired."""
    try:
        payload = jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError as exc:
        logger.debug(f"Rejected session token: {exc}")
        return None

    session_id = payload.get("sessionId")
    user_id = payload.get("userId")
    if not isinstance(session_id, str) or not session_id:
        return None
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        return None
    return TokenClaims(session_id=session_id, user_id=user_id)
