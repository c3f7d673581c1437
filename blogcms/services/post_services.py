# blogcms/services/post_services.py

"""
Сервисный слой для постов.

Знает про модели и БД, но не про HTTP-статусы. Кэш ленты сбрасывают роуты.
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from blogcms.config import settings
from blogcms.models import Category, Post, PostTag, Tag, POST_STATUSES, utcnow
from blogcms.services.results import PostPage, QueryResult
from blogcms.services.slugs import generate_slug
from blogcms.services.taxonomy_service import get_category_by_slug
from blogcms.utils.database import store_errors
from blogcms.utils.exceptions import InvalidInput
from blogcms.utils.validation import sanitize_html

logger = logging.getLogger(__name__)

# Ключ кэша для "главной" публичной ленты (GET /api/posts без фильтров)
POSTS_CACHE_KEY = "posts:list:published"


def _with_relations(query):
    # Автор, категория и теги за один заход
    return query.options(
        joinedload(Post.author),
        joinedload(Post.category),
        selectinload(Post.tags),
    )


def _newest_first(query):
    return query.order_by(
        Post.published_at.desc().nulls_last(),
        Post.created_at.desc(),
        Post.id.desc(),
    )


def _apply_search(query, search: Optional[str]):
    # Подстрока без учета регистра: title ИЛИ content ИЛИ excerpt.
    # % и _ в поисковой строке ищутся буквально, пробелы не обрезаются.
    if not search or not search.strip():
        return query
    return query.filter(
        or_(
            Post.title.icontains(search, autoescape=True),
            Post.content.icontains(search, autoescape=True),
            Post.excerpt.icontains(search, autoescape=True),
        )
    )


def get_post_by_id(db: Session, post_id: int) -> Optional[Post]:
    with store_errors(db, "fetching post by id"):
        return _with_relations(db.query(Post)).filter(Post.id == post_id).first()


def get_post_by_slug(db: Session, slug: str) -> Optional[Post]:
    """
    Пост по slug'у вместе с автором, категорией и тегами.

    Статус не проверяется: публичные роуты сами требуют status == published.
    """
    with store_errors(db, "fetching post by slug"):
        return _with_relations(db.query(Post)).filter(Post.slug == slug).first()


def get_paginated_posts(
    db: Session,
    page: int = 1,
    page_size: Optional[int] = None,
    status: str = "published",
    author_id: Optional[int] = None,
    category_id: Optional[int] = None,
    search: Optional[str] = None,
) -> QueryResult[PostPage]:
    """
    Страница постов с фильтрами:
    - точное совпадение статуса, автора и категории;
    - search - подстрока без учета регистра в title ИЛИ content ИЛИ excerpt.

    total считается по всему отфильтрованному набору, а не по странице.
    Ошибка БД возвращается как QueryResult.failure, а не как пустая страница.
    """
    if page_size is None:
        page_size = settings.DEFAULT_PAGE_SIZE
    if page < 1:
        raise InvalidInput("Page must be greater than or equal to 1")
    if not 1 <= page_size <= settings.MAX_PAGE_SIZE:
        raise InvalidInput(f"Page size must be between 1 and {settings.MAX_PAGE_SIZE}")
    if status not in POST_STATUSES:
        raise InvalidInput('Invalid status. Must be "draft" or "published"')

    query = db.query(Post).filter(Post.status == status)

    if author_id is not None:
        query = query.filter(Post.author_id == author_id)

    if category_id is not None:
        query = query.filter(Post.category_id == category_id)

    query = _apply_search(query, search)

    offset = (page - 1) * page_size

    try:
        total = query.count()
        posts = (
            _newest_first(_with_relations(query))
            .offset(offset)
            .limit(page_size)
            .all()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Error fetching paginated posts: %s", exc)
        return QueryResult.failure("Failed to fetch posts")

    return QueryResult.success(
        PostPage(posts=posts, total=total, page=page, page_size=page_size)
    )


def list_public_posts(
    db: Session,
    category_slug: Optional[str] = None,
    tag_slug: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Post]:
    """
    Все опубликованные посты для GET /api/posts.

    Неизвестная категория фильтр не применяет. Фильтр по тегу применяется
    уже к выбранным постам, в памяти.
    """
    query = db.query(Post).filter(Post.status == "published")

    if category_slug:
        category = get_category_by_slug(db, category_slug)
        if category is not None:
            query = query.filter(Post.category_id == category.id)

    query = _apply_search(query, search)

    with store_errors(db, "listing posts"):
        posts = _newest_first(_with_relations(query)).all()

    if tag_slug:
        posts = [p for p in posts if any(t.slug == tag_slug for t in p.tags)]

    return posts


# =================
# Изменение постов
# =================

def _check_category(db: Session, category_id: Optional[int]) -> Optional[int]:
    if category_id is None:
        return None
    with store_errors(db, "checking category"):
        exists = db.query(Category.id).filter(Category.id == category_id).first()
    if exists is None:
        raise InvalidInput("Category not found")
    return category_id


def _check_tags(db: Session, tag_ids: Iterable[int]) -> List[int]:
    # Порядок сохраняем, дубли выкидываем
    unique_ids = list(dict.fromkeys(tag_ids))
    if not unique_ids:
        return []
    with store_errors(db, "checking tags"):
        found = {row.id for row in db.query(Tag.id).filter(Tag.id.in_(unique_ids))}
    missing = [tag_id for tag_id in unique_ids if tag_id not in found]
    if missing:
        raise InvalidInput(f"Unknown tag id(s): {', '.join(map(str, missing))}")
    return unique_ids


def create_post_for_user(
    db: Session,
    author_id: int,
    data: Mapping[str, Any],
) -> Post:
    """
    Создать пост. Данные уже проверены validate_post.

    Пост и его теги пишутся одной транзакцией.
    """
    status = data.get("status") or "draft"
    category_id = _check_category(db, data.get("category_id"))
    tag_ids = _check_tags(db, data.get("tags") or [])
    slug = generate_slug(db, Post, data["title"])

    now = utcnow()
    db_post = Post(
        author_id=author_id,
        title=data["title"],
        slug=slug,
        content=sanitize_html(data["content"]),
        excerpt=data.get("excerpt") or None,
        featured_image=data.get("featured_image") or None,
        category_id=category_id,
        status=status,
        published_at=now if status == "published" else None,
        created_at=now,
        updated_at=now,
    )

    with store_errors(db, "creating post"):
        db_post.post_tags = [PostTag(tag_id=tag_id, created_at=now) for tag_id in tag_ids]
        db.add(db_post)
        db.commit()

    logger.info("Post %s created by user %s", db_post.slug, author_id)
    return get_post_by_id(db, db_post.id)


def update_post_for_user(
    db: Session,
    db_post: Post,
    data: Mapping[str, Any],
) -> Post:
    """
    Обновить пост (права уже проверены, data - только переданные поля).

    - slug пересчитывается, только если поменялся title;
    - published_at ставится при переходе в published и не трогается
      у уже опубликованного поста; возврат в draft его обнуляет;
    - tags, если переданы, заменяются целиком (delete + insert).
    Всё одной транзакцией.
    """
    title = data.get("title")
    if title and title != db_post.title:
        db_post.slug = generate_slug(db, Post, title, exclude_id=db_post.id)
        db_post.title = title

    if "content" in data:
        db_post.content = sanitize_html(data["content"])
    if "excerpt" in data:
        db_post.excerpt = data["excerpt"] or None
    if "featured_image" in data:
        db_post.featured_image = data["featured_image"] or None
    if "category_id" in data:
        db_post.category_id = _check_category(db, data["category_id"])

    status = data.get("status")
    if status:
        if status == "published" and db_post.status != "published":
            db_post.published_at = utcnow()
        elif status == "draft":
            db_post.published_at = None
        db_post.status = status

    tag_ids = None
    if data.get("tags") is not None:
        tag_ids = _check_tags(db, data["tags"])

    db_post.updated_at = utcnow()

    with store_errors(db, "updating post"):
        if tag_ids is not None:
            # Сначала удаляем старые связи, иначе вставка той же пары упрется в PK
            db_post.post_tags.clear()
            db.flush()
            now = utcnow()
            db_post.post_tags.extend(
                PostTag(tag_id=tag_id, created_at=now) for tag_id in tag_ids
            )
        db.commit()

    logger.info("Post %s updated", db_post.slug)
    return get_post_by_id(db, db_post.id)


def delete_post(db: Session, db_post: Post) -> None:
    """
    Удалить пост вместе с его тегами и комментариями (каскад ORM,
    одна транзакция).
    """
    slug = db_post.slug
    with store_errors(db, "deleting post"):
        db.delete(db_post)
        db.commit()
    logger.info("Post %s deleted", slug)
