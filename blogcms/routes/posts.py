"""
API endpoints для публикаций
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from blogcms.config import settings
from blogcms.dependencies import (
    get_current_user,
    get_current_user_optional,
    is_admin_or_owner,
    require_post_writer,
)
from blogcms.schemas import (
    MessageResponse,
    PostCreate,
    PostEnvelope,
    PostListEnvelope,
    PostPageResponse,
    PostResponse,
    PostUpdate,
    TokenClaims,
)
from blogcms.services.cache import cache
from blogcms.services.post_services import (
    POSTS_CACHE_KEY,
    create_post_for_user,
    delete_post,
    get_paginated_posts,
    get_post_by_slug,
    list_public_posts,
    update_post_for_user,
)
from blogcms.services.results import PostPage
from blogcms.utils.database import get_db
from blogcms.utils.exceptions import NotFound, Unauthorized
from blogcms.utils.validation import validate_post, validate_post_update

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{settings.API_PREFIX}/posts", tags=["posts"])
feed_router = APIRouter(prefix=f"{settings.API_PREFIX}/feed", tags=["posts"])


# ==========================
# ПОЛУЧИТЬ СПИСОК ПУБЛИКАЦИЙ
# ==========================

@router.get("", response_model=PostListEnvelope)
async def list_posts(
    category: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """
    Все опубликованные посты, новые сверху.

    Не требует авторизации. Фильтры: slug категории, slug тега, поиск
    по title/content/excerpt.
    """

    # Кэшируем только "главную" ленту без фильтров
    use_cache = not (category or tag or search)

    if use_cache:
        cached = await cache.get(POSTS_CACHE_KEY)
        if cached is not None:
            return {"success": True, "data": cached, "count": len(cached)}

    posts = list_public_posts(db, category_slug=category, tag_slug=tag, search=search)

    if use_cache:
        data = [PostResponse.model_validate(p).model_dump(mode="json") for p in posts]
        await cache.set(POSTS_CACHE_KEY, data, ttl=settings.CACHE_TTL)

    return {"success": True, "data": posts, "count": len(posts)}


# =========================
# СОЗДАНИЕ НОВОЙ ПУБЛИКАЦИИ
# =========================

@router.post("", response_model=PostEnvelope, status_code=status.HTTP_201_CREATED)
async def create_post(
    post: PostCreate,
    current_user: TokenClaims = Depends(require_post_writer),
    db: Session = Depends(get_db),
):
    """
    Создание публикации с привязкой к текущему пользователю (admin/author).
    """
    data = post.model_dump()
    validate_post(data)

    db_post = create_post_for_user(db, author_id=current_user.id, data=data)

    await cache.delete(POSTS_CACHE_KEY)

    return {"success": True, "data": db_post, "message": "Post created successfully"}


# ======================
# ПОЛУЧИТЬ ОДНУ ПУБЛИКАЦИЮ
# ======================

@router.get("/{slug}", response_model=PostEnvelope)
async def get_post(
    slug: str,
    current_user: Optional[TokenClaims] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    """
    Пост по slug'у с автором, категорией и тегами.

    Черновик виден только автору и админу, остальным - 404.
    """
    post = get_post_by_slug(db, slug)

    if post is None:
        raise NotFound("Post not found")

    if post.status != "published" and not is_admin_or_owner(current_user, post.author_id):
        raise NotFound("Post not found")

    return {"success": True, "data": post}


# =====================================
# ОБНОВЛЕНИЕ(РЕДАКТИРОВАНИЕ) ПУБЛИКАЦИИ
# =====================================

@router.put("/{slug}", response_model=PostEnvelope)
async def update_post(
    slug: str,
    post_update: PostUpdate,
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Обновление (редактирование) поста. Только автор или админ.
    """
    db_post = get_post_by_slug(db, slug)

    if db_post is None:
        raise NotFound("Post not found")

    if not is_admin_or_owner(current_user, db_post.author_id):
        raise Unauthorized()

    update_data = post_update.model_dump(exclude_unset=True)
    validate_post_update(update_data)

    updated = update_post_for_user(db, db_post, update_data)

    await cache.delete(POSTS_CACHE_KEY)

    return {"success": True, "data": updated, "message": "Post updated successfully"}


# ==================
# УДАЛИТЬ ПУБЛИКАЦИЮ
# ==================

@router.delete("/{slug}", response_model=MessageResponse)
async def remove_post(
    slug: str,
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Удаление поста вместе с тегами и комментариями. Только автор или админ.
    """
    db_post = get_post_by_slug(db, slug)

    if db_post is None:
        raise NotFound("Post not found")

    if not is_admin_or_owner(current_user, db_post.author_id):
        raise Unauthorized()

    delete_post(db, db_post)

    await cache.delete(POSTS_CACHE_KEY)

    return {"success": True, "message": "Post deleted successfully"}


# ==================
# ЛЕНТА ПО СТРАНИЦАМ
# ==================

@feed_router.get("", response_model=PostPageResponse)
async def feed(
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    post_status: str = Query("published", alias="status"),
    author_id: Optional[int] = None,
    category_id: Optional[int] = None,
    search: Optional[str] = None,
    current_user: Optional[TokenClaims] = Depends(get_current_user_optional),
    db: Session = Depends(get_db),
):
    """
    Страница ленты для фронтенда.

    Черновики: админ видит все, автор - только свои, остальным 401.
    Ошибка БД отдается как пустая страница (как и раньше у фронтенда).
    """
    if post_status != "published":
        if current_user is None or current_user.role not in ("admin", "author"):
            raise Unauthorized()
        if current_user.role != "admin":
            author_id = current_user.id

    result = get_paginated_posts(
        db,
        page=page,
        page_size=page_size,
        status=post_status,
        author_id=author_id,
        category_id=category_id,
        search=search,
    )

    if not result.ok:
        logger.warning("Feed served empty after store failure: %s", result.error)
        return PostPage(page=page, page_size=page_size or settings.DEFAULT_PAGE_SIZE).as_dict()

    return result.value.as_dict()
