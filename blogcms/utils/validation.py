# blogcms/utils/validation.py

"""
Проверка пользовательского ввода до любого обращения к БД.

Все функции чистые: получают словарь с полями запроса и либо молча
возвращают None, либо бросают InvalidInput с сообщением для клиента.
"""

from typing import Any, Mapping, Optional
from urllib.parse import urlparse

import bleach
from email_validator import EmailNotValidError, validate_email

from blogcms.models import ROLES, POST_STATUSES
from blogcms.utils.exceptions import InvalidInput

MIN_PASSWORD_LENGTH = 6

# Теги, которые разрешены в HTML-контенте поста
ALLOWED_TAGS = [
    "a", "abbr", "b", "blockquote", "br", "code", "em", "figcaption", "figure",
    "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i", "img", "li", "ol", "p",
    "pre", "s", "span", "strong", "sub", "sup", "table", "tbody", "td", "th",
    "thead", "tr", "u", "ul",
]
ALLOWED_ATTRIBUTES = {
    "a": ["href", "title", "rel", "target"],
    "img": ["src", "alt", "title", "width", "height"],
    "span": ["class"],
    "code": ["class"],
    "td": ["colspan", "rowspan"],
    "th": ["colspan", "rowspan"],
}
ALLOWED_PROTOCOLS = ["http", "https", "mailto"]


def _is_blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def is_valid_email(email: Optional[str]) -> bool:
    if not email:
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_valid_url(url: Optional[str]) -> bool:
    if not url:
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def validate_registration(data: Mapping[str, Any]) -> None:
    name = data.get("name")
    if _is_blank(name):
        raise InvalidInput("Name is required")
    if len(name) > 100:
        raise InvalidInput("Name must be less than 100 characters")

    if not is_valid_email(data.get("email")):
        raise InvalidInput("Valid email is required")

    password = data.get("password")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInput(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )

    role = data.get("role")
    if role and role not in ROLES:
        raise InvalidInput("Invalid role specified")


def validate_login(data: Mapping[str, Any]) -> None:
    if not is_valid_email(data.get("email")):
        raise InvalidInput("Valid email is required")
    if not data.get("password"):
        raise InvalidInput("Password is required")


def _check_post_fields(data: Mapping[str, Any]) -> None:
    if "title" in data:
        title = data["title"]
        if _is_blank(title):
            raise InvalidInput("Title is required")
        if len(title) > 200:
            raise InvalidInput("Title must be less than 200 characters")

    if "content" in data and _is_blank(data["content"]):
        raise InvalidInput("Content is required")

    excerpt = data.get("excerpt")
    if excerpt and len(excerpt) > 300:
        raise InvalidInput("Excerpt must be less than 300 characters")

    status = data.get("status")
    if status and status not in POST_STATUSES:
        raise InvalidInput('Invalid status. Must be "draft" or "published"')

    image = data.get("featured_image")
    if image and not is_valid_url(image):
        raise InvalidInput("Featured image must be a valid http(s) URL")


def validate_post(data: Mapping[str, Any]) -> None:
    """Полная проверка при создании: title и content обязательны."""
    if _is_blank(data.get("title")):
        raise InvalidInput("Title is required")
    if _is_blank(data.get("content")):
        raise InvalidInput("Content is required")
    _check_post_fields(data)


def validate_post_update(data: Mapping[str, Any]) -> None:
    """Частичная проверка: только переданные поля."""
    _check_post_fields(data)


def validate_category(data: Mapping[str, Any]) -> None:
    name = data.get("name")
    if _is_blank(name):
        raise InvalidInput("Category name is required")
    if len(name) > 100:
        raise InvalidInput("Category name must be less than 100 characters")

    description = data.get("description")
    if description and len(description) > 500:
        raise InvalidInput("Description must be less than 500 characters")


def validate_tag(data: Mapping[str, Any]) -> None:
    name = data.get("name")
    if _is_blank(name):
        raise InvalidInput("Tag name is required")
    if len(name) > 50:
        raise InvalidInput("Tag name must be less than 50 characters")


def validate_comment(data: Mapping[str, Any]) -> None:
    content = data.get("content")
    if _is_blank(content):
        raise InvalidInput("Comment content is required")
    if len(content) > 1000:
        raise InvalidInput("Comment must be less than 1000 characters")


def sanitize_html(html: Optional[str]) -> str:
    """
    Чистим HTML поста: script, обработчики on*, javascript:-ссылки
    и всё, чего нет в белом списке.
    """
    if not html:
        return ""
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )
