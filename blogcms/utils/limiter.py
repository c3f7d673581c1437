from slowapi import Limiter
from slowapi.util import get_remote_address

from blogcms.config import settings

# Ограничитель частоты запросов (register/login)
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)
