# blogcms/services/comment_service.py

"""
Сервисный слой для комментариев.

Знает про Comment/Post/User и БД, но не про HTTP-исключения.
"""

import logging
from typing import Optional, List

from sqlalchemy.orm import Session, joinedload

from blogcms.models import Comment, Post, utcnow
from blogcms.utils.database import store_errors
from blogcms.utils.exceptions import NotFound

logger = logging.getLogger(__name__)


def _can_modify(comment: Comment, user_id: int, user_role: str) -> bool:
    return user_role == "admin" or comment.user_id == user_id


def list_comments_for_post(
    db: Session,
    post_id: int,
    skip: int = 0,
    limit: int = 50,
) -> List[Comment]:
    """
    Комментарии к посту, новые сверху.
    """
    with store_errors(db, "listing comments"):
        return (
            db.query(Comment)
            .options(joinedload(Comment.author))
            .filter(Comment.post_id == post_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


def get_comment(
    db: Session,
    comment_id: int,
    post_id: Optional[int] = None,
) -> Optional[Comment]:
    """
    Найти комментарий по id (и, если задан, по post_id).
    """
    query = db.query(Comment).options(joinedload(Comment.author)).filter(
        Comment.id == comment_id
    )
    if post_id is not None:
        query = query.filter(Comment.post_id == post_id)
    with store_errors(db, "fetching comment"):
        return query.first()


def create_comment(
    db: Session,
    post_id: int,
    user_id: int,
    content: str,
) -> Comment:
    """
    Создать комментарий к существующему посту от имени пользователя.
    """
    with store_errors(db, "checking post for comment"):
        post_exists = db.query(Post.id).filter(Post.id == post_id).first()
    if post_exists is None:
        raise NotFound("Post not found")

    now = utcnow()
    db_comment = Comment(
        post_id=post_id,
        user_id=user_id,
        content=content,
        created_at=now,
        updated_at=now,
    )
    with store_errors(db, "creating comment"):
        db.add(db_comment)
        db.commit()

    logger.info("Comment %s added to post %s by user %s", db_comment.id, post_id, user_id)
    return get_comment(db, db_comment.id)


def update_comment(
    db: Session,
    comment_id: int,
    user_id: int,
    user_role: str,
    content: str,
    post_id: Optional[int] = None,
) -> Optional[Comment]:
    """
    Обновить комментарий:
    - None    -> комментарий не найден или пользователь не автор/не админ;
    - Comment -> успешно обновлён.
    """
    db_comment = get_comment(db, comment_id, post_id=post_id)
    if db_comment is None or not _can_modify(db_comment, user_id, user_role):
        return None

    db_comment.content = content
    db_comment.updated_at = utcnow()
    with store_errors(db, "updating comment"):
        db.commit()
    return get_comment(db, comment_id)


def delete_comment(
    db: Session,
    comment_id: int,
    user_id: int,
    user_role: str,
    post_id: Optional[int] = None,
) -> bool:
    """
    Удалить комментарий. Админ удаляет любой, остальные - только свой.

    False и для "не найден", и для "нет прав": наружу это не различается.
    """
    db_comment = get_comment(db, comment_id, post_id=post_id)
    if db_comment is None or not _can_modify(db_comment, user_id, user_role):
        return False

    with store_errors(db, "deleting comment"):
        db.delete(db_comment)
        db.commit()

    logger.info("Comment %s deleted by user %s", comment_id, user_id)
    return True
