# blogcms/routes/taxonomy.py

"""
API endpoints для категорий и тегов.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from blogcms.config import settings
from blogcms.dependencies import require_admin, require_post_writer
from blogcms.schemas import (
    CategoryCreate,
    CategoryEnvelope,
    CategoryListEnvelope,
    TagCreate,
    TagEnvelope,
    TagListEnvelope,
    TokenClaims,
)
from blogcms.services.taxonomy_service import (
    create_category,
    create_tag,
    list_categories_with_count,
    list_tags_with_count,
)
from blogcms.utils.database import get_db
from blogcms.utils.validation import validate_category, validate_tag

categories_router = APIRouter(prefix=f"{settings.API_PREFIX}/categories", tags=["categories"])
tags_router = APIRouter(prefix=f"{settings.API_PREFIX}/tags", tags=["tags"])


@categories_router.get("", response_model=CategoryListEnvelope)
async def list_categories(db: Session = Depends(get_db)):
    """Категории со счетчиком опубликованных постов"""
    categories = list_categories_with_count(db)
    return {"success": True, "data": categories, "count": len(categories)}


@categories_router.post("", response_model=CategoryEnvelope, status_code=status.HTTP_201_CREATED)
async def add_category(
    category: CategoryCreate,
    current_user: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Новая категория. Только админ."""
    validate_category(category.model_dump())
    db_category = create_category(db, name=category.name, description=category.description)
    return {"success": True, "data": db_category}


@tags_router.get("", response_model=TagListEnvelope)
async def list_tags(db: Session = Depends(get_db)):
    """Теги со счетчиком опубликованных постов"""
    tags = list_tags_with_count(db)
    return {"success": True, "data": tags, "count": len(tags)}


@tags_router.post("", response_model=TagEnvelope, status_code=status.HTTP_201_CREATED)
async def add_tag(
    tag: TagCreate,
    current_user: TokenClaims = Depends(require_post_writer),
    db: Session = Depends(get_db),
):
    """Новый тег. Админ или автор."""
    validate_tag(tag.model_dump())
    db_tag = create_tag(db, name=tag.name)
    return {"success": True, "data": db_tag}
