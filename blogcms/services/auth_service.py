# blogcms/services/auth_service.py

"""
Сервисный слой для регистрации и логина.

Знает про модели, БД, хэширование и JWT, но не про HTTP-роуты.
Входные данные уже проверены blogcms.utils.validation.
"""

import logging
from typing import Any, Mapping, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blogcms.config import settings
from blogcms.models import User, utcnow
from blogcms.utils.database import store_errors
from blogcms.utils.exceptions import InvalidInput, Unauthorized
from blogcms.utils.security import (
    hash_password,
    verify_password,
    create_access_token,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
EMAIL_TAKEN = "User with this email already exists"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def issue_token(user: User) -> str:
    return create_access_token(user_id=user.id, email=user.email, role=user.role)


def register_user(
    db: Session,
    data: Mapping[str, Any],
) -> Tuple[User, str]:
    """
    Зарегистрировать нового пользователя и выдать ему токен.

    Занятый email -> InvalidInput (в том числе если уникальный индекс
    сработал при гонке двух регистраций).
    """
    email = normalize_email(data["email"])

    # Проверка уникальности email
    with store_errors(db, "checking email"):
        exists = db.query(User.id).filter(User.email == email).first()
    if exists:
        raise InvalidInput(EMAIL_TAKEN)

    # Хэшируем пароль и создаём пользователя
    now = utcnow()
    db_user = User(
        name=data["name"].strip(),
        email=email,
        password=hash_password(data["password"]),
        role=data.get("role") or "reader",
        bio=None,
        avatar_url=settings.DEFAULT_AVATAR_URL.format(seed=email),
        created_at=now,
        updated_at=now,
    )

    with store_errors(db, "creating user"):
        try:
            db.add(db_user)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise InvalidInput(EMAIL_TAKEN)
        db.refresh(db_user)

    logger.info("User %s registered with role %s", db_user.id, db_user.role)
    return db_user, issue_token(db_user)


def authenticate_user(
    db: Session,
    email: str,
    password: str,
) -> Tuple[User, str]:
    """
    Аутентифицировать пользователя по email и паролю.

    "Нет такого пользователя" и "неверный пароль" дают одну и ту же ошибку.
    """
    with store_errors(db, "fetching user by email"):
        db_user = db.query(User).filter(User.email == normalize_email(email)).first()

    if not db_user or not verify_password(password, db_user.password):
        raise Unauthorized(INVALID_CREDENTIALS)

    return db_user, issue_token(db_user)


def get_user_by_id(db: Session, user_id: int) -> User | None:
    with store_errors(db, "fetching user by id"):
        return db.query(User).filter(User.id == user_id).first()
