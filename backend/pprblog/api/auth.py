"""Authentication API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Response, status

from pprblog.api.deps import (
    AuthContext,
    get_accounts,
    get_app_settings,
    get_auth_context,
    get_session_manager,
    get_session_token,
)
from pprblog.config import Settings
from pprblog.errors import DuplicateEmailError, InvalidCredentialsError
from pprblog.schemas.auth import (
    AuthResponse,
    LoginRequest,
    SafeUser,
    SessionStatus,
    SignupRequest,
    SuccessResponse,
)
from pprblog.services.accounts import AccountService
from pprblog.services.sessions import SessionManager

router = APIRouter(prefix="/auth", tags=["auth"])


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    """Issue HttpOnly session cookie."""
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.session_cookie_samesite,
        path=settings.session_cookie_path,
        max_age=settings.session_max_age,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    """Clear session cookie."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        path=settings.session_cookie_path,
        secure=settings.cookie_secure,
        httponly=True,
        samesite=settings.session_cookie_samesite,
    )


@router.post("/signup", response_model=AuthResponse)
def signup(
    user_data: SignupRequest,
    response: Response,
    accounts: AccountService = Depends(get_accounts),
    sessions: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_app_settings),
):
    """Register a new user and log them in."""
    try:
        user = accounts.create_user(user_data.name, user_data.email, user_data.password)
    except DuplicateEmailError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=exc.detail,
        )

    token = sessions.issue(user.id)
    set_session_cookie(response, token, settings)

    return AuthResponse(user=SafeUser.model_validate(user))


@router.post("/login", response_model=AuthResponse)
def login(
    user_data: LoginRequest,
    response: Response,
    accounts: AccountService = Depends(get_accounts),
    sessions: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_app_settings),
):
    """Login and get a session cookie."""
    user = accounts.authenticate(user_data.email, user_data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=InvalidCredentialsError.detail,
        )

    token = sessions.issue(user.id)
    set_session_cookie(response, token, settings)

    return AuthResponse(user=SafeUser.model_validate(user))


@router.post("/logout", response_model=SuccessResponse)
def logout(
    response: Response,
    token: str | None = Depends(get_session_token),
    sessions: SessionManager = Depends(get_session_manager),
    settings: Settings = Depends(get_app_settings),
):
    """Revoke the cookie's session, if any, and clear the cookie."""
    claims = sessions.verify(token)
    if claims is not None:
        sessions.revoke(claims.session_id)
    clear_session_cookie(response, settings)
    return SuccessResponse()


@router.get("/session", response_model=SessionStatus)
def session_status(auth: AuthContext = Depends(get_auth_context)):
    """Who is logged in, if anyone."""
    return SessionStatus(is_authenticated=auth.is_authenticated, user=auth.user)
