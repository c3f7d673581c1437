# blogcms/dependencies.py

"""
Зависимости для использования в endpoints
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import ValidationError

from blogcms.schemas import TokenClaims
from blogcms.utils.exceptions import Unauthorized
from blogcms.utils.security import decode_token

security = HTTPBearer(auto_error=False)

POST_WRITER_ROLES = ("admin", "author")


def _claims_from_credentials(
        credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[TokenClaims]:
    if credentials is None:
        return None

    payload = decode_token(credentials.credentials)
    if payload is None:
        return None

    try:
        return TokenClaims.model_validate(payload)
    except ValidationError:
        return None


async def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenClaims:
    """
    Получаем текущего авторизованного пользователя

    Извлекаем Bearer токен из заголовка Authorization, проверяем подпись
    и срок действия, возвращаем {id, email, role} из токена.
    Нет токена, он невалиден или истек - 401.
    """
    claims = _claims_from_credentials(credentials)
    if claims is None:
        raise Unauthorized()
    return claims


async def get_current_user_optional(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[TokenClaims]:
    """
    Необязательный текущий пользователь.

    Если токена нет или он невалиден - возвращаем None.
    """
    return _claims_from_credentials(credentials)


async def require_post_writer(
        current_user: TokenClaims = Depends(get_current_user),
) -> TokenClaims:
    """Создавать посты могут только admin и author."""
    if current_user.role not in POST_WRITER_ROLES:
        raise Unauthorized()
    return current_user


async def require_admin(
        current_user: TokenClaims = Depends(get_current_user),
) -> TokenClaims:
    if current_user.role != "admin":
        raise Unauthorized()
    return current_user


def is_admin_or_owner(claims: Optional[TokenClaims], owner_id: int) -> bool:
    """Единственная проверка прав на ресурс: админ или владелец."""
    if claims is None:
        return False
    return claims.role == "admin" or claims.id == owner_id
