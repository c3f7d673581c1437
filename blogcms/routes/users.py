# blogcms/routes/users.py

"""
API enpoints для работы с текущим пользователем.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from blogcms.config import settings
from blogcms.dependencies import get_current_user
from blogcms.schemas import TokenClaims, UserResponse
from blogcms.services.auth_service import get_user_by_id
from blogcms.utils.database import get_db
from blogcms.utils.exceptions import Unauthorized

router = APIRouter(
    prefix=f"{settings.API_PREFIX}/users",
    tags=["users"],
)

@router.get("/me", response_model=UserResponse, status_code=status.HTTP_200_OK)
async def get_me(
        current_user: TokenClaims = Depends(get_current_user),
        db: Session = Depends(get_db),
):
    """
    Возвращает данные текущего пользователя (без пароля)
    """
    user = get_user_by_id(db, current_user.id)
    if user is None:
        # Токен валиден, но пользователя уже нет
        raise Unauthorized()
    return user
