# blogcms/routes/auth.py

"""
API endpoints для регистрации и авторизации.
"""

from fastapi import APIRouter, Depends, status, Request

from sqlalchemy.orm import Session

from blogcms.schemas import UserCreate, UserLogin, AuthResponse
from blogcms.services.auth_service import register_user, authenticate_user
from blogcms.utils.database import get_db
from blogcms.utils.limiter import limiter
from blogcms.utils.validation import validate_registration, validate_login
from blogcms.config import settings

# Router для всех auth-эндпоинтов
router = APIRouter(
    prefix=f"{settings.API_PREFIX}/auth",
    tags=["auth"],
    responses={400: {"description": "Bad Request"}},
)


# ===============================
# РЕГИСТРАЦИЯ НОВОГО ПОЛЬЗОВАТЕЛЯ
# ===============================

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.REGISTER_RATE_LIMIT)
async def register(
        user: UserCreate,
        request: Request,
        db: Session = Depends(get_db)
):
    """
    Регистрация: проверка полей, уникальность email, хэш пароля,
    аватар по умолчанию, токен на 7 дней.
    """
    data = user.model_dump()
    validate_registration(data)

    db_user, token = register_user(db, data)

    return {
        "success": True,
        "user": db_user,
        "token": token,
        "message": "User registered successfully",
    }


# ==============================
# Авторизация созданного профиля
# ==============================

@router.post("/login", response_model=AuthResponse, status_code=status.HTTP_200_OK)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
        user: UserLogin,
        request: Request,
        db: Session = Depends(get_db)
):
    """Логин пользователя по email и паролю"""
    validate_login(user.model_dump())

    db_user, token = authenticate_user(db, user.email, user.password)

    return {
        "success": True,
        "user": db_user,
        "token": token,
        "message": "Login successful",
    }
