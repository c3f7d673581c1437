# blogcms/routes/comments.py

"""
API endpoints для комментариев.

Все endpoints кроме GET требуют авторизации.
Удаление/обновление - только автор комментария или админ.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from blogcms.config import settings
from blogcms.dependencies import get_current_user, get_current_user_optional, is_admin_or_owner
from blogcms.models import Post
from blogcms.schemas import (
    CommentCreate,
    CommentEnvelope,
    CommentListEnvelope,
    MessageResponse,
    TokenClaims,
)
from blogcms.services.comment_service import (
    create_comment,
    delete_comment,
    list_comments_for_post,
    update_comment,
)
from blogcms.services.post_services import get_post_by_slug
from blogcms.utils.database import get_db
from blogcms.utils.exceptions import NotFound
from blogcms.utils.validation import validate_comment


router = APIRouter(prefix=f"{settings.API_PREFIX}/posts", tags=["comments"])


def _visible_post(db: Session, slug: str, current_user: Optional[TokenClaims]) -> Post:
    # Комментарии живут только у видимых постов: черновик чужим - 404
    post = get_post_by_slug(db, slug)
    if post is None:
        raise NotFound("Post not found")
    if post.status != "published" and not is_admin_or_owner(current_user, post.author_id):
        raise NotFound("Post not found")
    return post


@router.get("/{slug}/comments", response_model=CommentListEnvelope)
async def list_comments(
    slug: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    current_user: Optional[TokenClaims] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    """
    Комментарии к посту, новые сверху.

    Не требует авторизации.
    """
    post = _visible_post(db, slug, current_user)
    comments = list_comments_for_post(db, post_id=post.id, skip=skip, limit=limit)
    return {"success": True, "data": comments, "count": len(comments)}


@router.post(
    "/{slug}/comments",
    response_model=CommentEnvelope,
    status_code=status.HTTP_201_CREATED
)
async def add_comment(
    slug: str,
    comment: CommentCreate,
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Создаём комментарий к посту.

    Только для авторизованных пользователей (любая роль).
    """
    validate_comment(comment.model_dump())
    post = _visible_post(db, slug, current_user)

    db_comment = create_comment(
        db,
        post_id=post.id,
        user_id=current_user.id,
        content=comment.content.strip(),
    )
    return {"success": True, "data": db_comment, "message": "Comment added successfully"}


@router.put("/{slug}/comments/{comment_id}", response_model=CommentEnvelope)
async def edit_comment(
    slug: str,
    comment_id: int,
    comment: CommentCreate,
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Обновить комментарий.

    Только автор комментария или админ.
    """
    validate_comment(comment.model_dump())
    post = _visible_post(db, slug, current_user)

    result = update_comment(
        db,
        comment_id=comment_id,
        user_id=current_user.id,
        user_role=current_user.role,
        content=comment.content.strip(),
        post_id=post.id,
    )

    if result is None:
        raise NotFound("Comment not found")

    return {"success": True, "data": result, "message": "Comment updated successfully"}


@router.delete("/{slug}/comments/{comment_id}", response_model=MessageResponse)
async def remove_comment(
    slug: str,
    comment_id: int,
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Удалить комментарий.

    Только автор комментария или админ. "Нет такого" и "нет прав"
    не различаются: в обоих случаях 404.
    """
    post = _visible_post(db, slug, current_user)

    deleted = delete_comment(
        db,
        comment_id=comment_id,
        user_id=current_user.id,
        user_role=current_user.role,
        post_id=post.id,
    )

    if not deleted:
        raise NotFound("Comment not found")

    return {"success": True, "message": "Comment deleted successfully"}
