# blogcms/services/taxonomy_service.py

"""
Категории и теги: списки со счетчиком постов и создание.
"""

import logging
from typing import List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from blogcms.models import Category, Post, PostTag, Tag, utcnow
from blogcms.services.slugs import generate_slug
from blogcms.utils.database import store_errors

logger = logging.getLogger(__name__)


def list_categories_with_count(db: Session) -> List[dict]:
    """Категории по алфавиту, post_count - только опубликованные посты."""
    query = (
        db.query(Category, func.count(Post.id))
        .outerjoin(
            Post,
            and_(Post.category_id == Category.id, Post.status == "published"),
        )
        .group_by(Category.id)
        .order_by(Category.name)
    )
    with store_errors(db, "listing categories"):
        rows = query.all()

    return [
        {
            "id": category.id,
            "name": category.name,
            "slug": category.slug,
            "description": category.description,
            "post_count": count,
        }
        for category, count in rows
    ]


def list_tags_with_count(db: Session) -> List[dict]:
    query = (
        db.query(Tag, func.count(Post.id))
        .outerjoin(PostTag, PostTag.tag_id == Tag.id)
        .outerjoin(
            Post,
            and_(Post.id == PostTag.post_id, Post.status == "published"),
        )
        .group_by(Tag.id)
        .order_by(Tag.name)
    )
    with store_errors(db, "listing tags"):
        rows = query.all()

    return [
        {"id": tag.id, "name": tag.name, "slug": tag.slug, "post_count": count}
        for tag, count in rows
    ]


def get_category_by_slug(db: Session, slug: str) -> Optional[Category]:
    with store_errors(db, "fetching category"):
        return db.query(Category).filter(Category.slug == slug).first()


def create_category(
    db: Session,
    name: str,
    description: Optional[str] = None,
) -> Category:
    name = name.strip()
    db_category = Category(
        name=name,
        slug=generate_slug(db, Category, name),
        description=description or None,
        created_at=utcnow(),
    )
    with store_errors(db, "creating category"):
        db.add(db_category)
        db.commit()
        db.refresh(db_category)

    logger.info("Category %s created", db_category.slug)
    return db_category


def create_tag(db: Session, name: str) -> Tag:
    name = name.strip()
    db_tag = Tag(
        name=name,
        slug=generate_slug(db, Tag, name),
        created_at=utcnow(),
    )
    with store_errors(db, "creating tag"):
        db.add(db_tag)
        db.commit()
        db.refresh(db_tag)

    logger.info("Tag %s created", db_tag.slug)
    return db_tag
