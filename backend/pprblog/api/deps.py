"""Shared FastAPI dependencies.

Collaborators are built once in ``create_app`` and parked on ``app.state``;
these helpers hand them to route functions.
"""
from dataclasses import dataclass

from fastapi import Depends, Request

from pprblog.config import Settings
from pprblog.errors import ForbiddenError, UnauthorizedError
from pprblog.schemas.user import UserOut
from pprblog.services.accounts import AccountService
from pprblog.services.queries import BlogQueries
from pprblog.services.sessions import SessionManager


@dataclass(frozen=True)
class AuthContext:
    user: UserOut | None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.sessions


def get_accounts(request: Request) -> AccountService:
    return request.app.state.accounts


def get_queries(request: Request) -> BlogQueries:
    return request.app.state.queries


def get_session_token(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> str | None:
    """Raw session cookie value, if the browser sent one."""
    return request.cookies.get(settings.session_cookie_name)


def get_optional_user(
    token: str | None = Depends(get_session_token),
    sessions: SessionManager = Depends(get_session_manager),
) -> UserOut | None:
    """Current user or None. Never fails; anonymous visitors pass straight through."""
    return sessions.current_user(token)


def get_auth_context(user: UserOut | None = Depends(get_optional_user)) -> AuthContext:
    return AuthContext(user=user)


def get_current_user(user: UserOut | None = Depends(get_optional_user)) -> UserOut:
    """Dependency for procedures that need a logged-in user."""
    if user is None:
        raise UnauthorizedError()
    return user


def require_admin(user: UserOut = Depends(get_current_user)) -> UserOut:
    """Dependency for admin-only procedures."""
    if not user.is_admin:
        raise ForbiddenError()
    return user
