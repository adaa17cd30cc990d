"""Post and comment API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status

from pprblog.api.deps import get_current_user, get_queries, require_admin
from pprblog.errors import NotFoundError
from pprblog.schemas.post import (
    CommentCreate,
    CommentOut,
    DeletePostResponse,
    PostCreate,
    PostDetail,
    PostOut,
)
from pprblog.schemas.user import UserOut
from pprblog.services.queries import BlogQueries

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=list[PostOut])
def list_posts(queries: BlogQueries = Depends(get_queries)):
    """All published posts, newest first (no auth required)."""
    return queries.all_posts()


@router.get("/search", response_model=list[PostOut])
def search_posts(query: str = "", queries: BlogQueries = Depends(get_queries)):
    """Search published posts by title or content."""
    return queries.search_posts(query)


@router.get("/{post_id}", response_model=PostDetail)
def get_post(post_id: int, queries: BlogQueries = Depends(get_queries)):
    """Get a single post with its comments."""
    post = queries.post_by_id(post_id)
    if post is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )
    return post


@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
def create_post(
    post_data: PostCreate,
    queries: BlogQueries = Depends(get_queries),
    current_user: UserOut = Depends(get_current_user),
):
    """Publish a post as the current user."""
    return queries.create_post(current_user.id, post_data.title, post_data.content)


@router.delete("/{post_id}", response_model=DeletePostResponse)
def delete_post(
    post_id: int,
    queries: BlogQueries = Depends(get_queries),
    admin: UserOut = Depends(require_admin),
):
    """Delete a post (admin only)."""
    try:
        queries.delete_post(post_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.detail,
        )
    return DeletePostResponse(deleted_id=post_id)


@router.post("/{post_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def add_comment(
    post_id: int,
    comment_data: CommentCreate,
    queries: BlogQueries = Depends(get_queries),
    current_user: UserOut = Depends(get_current_user),
):
    """Comment on a post as the current user."""
    try:
        return queries.add_comment(post_id, current_user.id, comment_data.content)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.detail,
        )
