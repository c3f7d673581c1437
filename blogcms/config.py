"""
Конфигурация приложения.

Всё берется из переменных окружения или .env файла.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Pydantic Settings конфиг
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database
    DATABASE_URL: str
    AUTO_CREATE_TABLES: bool = False

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_ENABLED: bool = True
    CACHE_TTL: int = 300

    # JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7

    # Пароли
    BCRYPT_ROUNDS: int = 12

    # Server
    DEBUG: bool = False
    API_PREFIX: str = "/api"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    # RATE-LIMITS
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    REGISTER_RATE_LIMIT: str = "5/minute"  # Значения по-умолчанию, на случай
    LOGIN_RATE_LIMIT: str = "10/minute"    # если в .env не указаны иные значения

    # Пагинация
    DEFAULT_PAGE_SIZE: int = 12
    MAX_PAGE_SIZE: int = 100

    # Slug-генератор
    SLUG_MAX_ATTEMPTS: int = 100
    # False - заголовок без букв/цифр отклоняется с 400,
    # True  - выдаются вырожденные slug'и "-1", "-2", ...
    ALLOW_EMPTY_SLUGS: bool = False

    # Аватар по умолчанию, {seed} подставляется email пользователя
    DEFAULT_AVATAR_URL: str = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"


# Создаем глобальный объект settings
settings = Settings()
