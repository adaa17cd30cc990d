"""User API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status

from pprblog.api.deps import get_accounts, get_current_user, get_queries
from pprblog.errors import NotFoundError
from pprblog.schemas.post import PostOut
from pprblog.schemas.user import ProfileUpdate, UserListItem, UserOut, UserProfile
from pprblog.services.accounts import AccountService
from pprblog.services.queries import BlogQueries

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserListItem])
def list_users(queries: BlogQueries = Depends(get_queries)):
    """All active users with their post counts."""
    return queries.all_users()


@router.get("/me", response_model=UserOut)
def get_me(current_user: UserOut = Depends(get_current_user)):
    """The logged-in user."""
    return current_user


@router.patch("/me", response_model=UserOut)
def update_me(
    profile_data: ProfileUpdate,
    accounts: AccountService = Depends(get_accounts),
    current_user: UserOut = Depends(get_current_user),
):
    """Update the logged-in user's name, bio or avatar."""
    try:
        return accounts.update_profile(
            current_user.id,
            name=profile_data.name,
            bio=profile_data.bio,
            avatar=profile_data.avatar,
        )
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.detail,
        )


@router.get("/{user_id}", response_model=UserProfile)
def get_user(user_id: int, queries: BlogQueries = Depends(get_queries)):
    """Public profile with posts."""
    user = queries.user_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


@router.get("/{user_id}/posts", response_model=list[PostOut])
def get_user_posts(user_id: int, queries: BlogQueries = Depends(get_queries)):
    return queries.user_posts(user_id)
