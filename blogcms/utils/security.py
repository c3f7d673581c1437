# blogcms/utils/security.py

"""
Утилиты для безопасности: хэширование пароля и JWT токены
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
import jwt
from passlib.context import CryptContext
from blogcms.config import settings

# Контекст bcrypt алгоритм
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# =============================
# ФУНКЦИЯ ДЛЯ РАБОТЫ С ПАРОЛЯМИ
# =============================

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

# Проверка, что введённый пароль совпадает с хэшем в БД
def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

# =============================
# ФУНКЦИИ ДЛЯ РАБОТЫ С JWT
# =============================

def create_access_token(
    user_id: int,
    email: str,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    now = datetime.now(timezone.utc)

    # Определяем время истечения токена
    if expires_delta is None:
        expires_delta = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)

    to_encode = {
        "sub": str(user_id),
        "id": user_id,
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + expires_delta,
    }

    # Кодируем в JWT
    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def decode_token(token: str) -> Optional[dict]:
    """
    Декодируем JWT токен и проверяем подпись
    """

    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
        return payload
    except jwt.ExpiredSignatureError:
        # Токен истек
        return None
    except jwt.InvalidTokenError:
        # Токен подделан
        return None
