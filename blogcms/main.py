"""
Главный файл приложения
Здесь инициализируется FastAPI и подключаются маршруты
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from dotenv import load_dotenv
load_dotenv()

from blogcms.config import settings
from blogcms.models import Base
from blogcms.routes import auth, comments, posts, taxonomy, users
from blogcms.services.cache import cache
from blogcms.utils.database import engine
from blogcms.utils.log_config import setup_logging

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Движок БД и кэш живут столько же, сколько процесс
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
    await cache.connect()
    logger.info("Blog CMS started")
    yield
    await cache.close()
    engine.dispose()


# Создаем приложение
app = FastAPI(
    title="Blog CMS API",
    description="Blog with posts, categories, tags and comments",
    version="1.0.0",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    lifespan=lifespan,
)


# Подключаем хендлеры

from blogcms.utils.exceptions import (
    app_error_handler,
    http_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
    AppError,
    rate_limit_exceeded_handler,
)

# Глобальные обработчики ошибок

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# =============================
# Ограничитель частоты запросов
# =============================
from slowapi.middleware import SlowAPIMiddleware
from slowapi.errors import RateLimitExceeded
from blogcms.utils.limiter import limiter


app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# CORS (чтобы фронтенд мог обращаться к API)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.DEBUG else settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    )


# ==============
# HEALTH-CHECKING
# ==============

@app.get("/health")
async def health_check():
    """Проверка, что приложение живо"""
    return {"status": "ok", "cache": await cache.ping()}


# =====================
# Подключаем все ROUTES
# =====================

app.include_router(auth.router) # Регистрация и авторизация
app.include_router(users.router) # Текущий пользователь
app.include_router(posts.router) # Посты
app.include_router(posts.feed_router) # Лента по страницам
app.include_router(comments.router) # Комментарии
app.include_router(taxonomy.categories_router) # Категории
app.include_router(taxonomy.tags_router) # Теги


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
