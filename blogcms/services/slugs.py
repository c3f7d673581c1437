# blogcms/services/slugs.py

"""
Генерация уникальных slug'ов для постов, категорий и тегов.

Кандидат проверяется запросом к БД; занятые кандидаты получают
суффикс -1, -2, -3 ... Количество попыток ограничено.
"""

import logging
import re
from typing import Optional

from sqlalchemy.orm import Session

from blogcms.config import settings
from blogcms.utils.database import store_errors
from blogcms.utils.exceptions import InvalidInput, SlugGenerationError

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """'Hello, World!' -> 'hello-world'"""
    return _NON_ALNUM.sub("-", title.lower()).strip("-")


def _slug_taken(db: Session, model, slug: str, exclude_id: Optional[int]) -> bool:
    query = db.query(model.id).filter(model.slug == slug)
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    with store_errors(db, f"probing {model.__tablename__}.slug"):
        return query.first() is not None


def generate_slug(
    db: Session,
    model,
    title: str,
    exclude_id: Optional[int] = None,
    *,
    max_attempts: Optional[int] = None,
    allow_empty: Optional[bool] = None,
) -> str:
    """
    Вернуть свободный slug для строки model (Post, Category, Tag).

    exclude_id - id строки, которую не считаем конфликтом (пересчет slug'а
    при редактировании). Ошибка БД пробрасывается как StoreError и никогда
    не считается "slug свободен".
    """
    if max_attempts is None:
        max_attempts = settings.SLUG_MAX_ATTEMPTS
    if allow_empty is None:
        allow_empty = settings.ALLOW_EMPTY_SLUGS

    base = slugify(title or "")
    if not base and not allow_empty:
        raise InvalidInput("Title must contain at least one letter or digit")

    # Пустой base сразу идет в числовую серию: "-1", "-2", ...
    counter = 0 if base else 1
    for _ in range(max_attempts):
        candidate = f"{base}-{counter}" if counter else base
        if not _slug_taken(db, model, candidate, exclude_id):
            return candidate
        counter += 1

    logger.error(
        "Gave up generating slug for %r in %s after %d attempts",
        title, model.__tablename__, max_attempts,
    )
    raise SlugGenerationError()
