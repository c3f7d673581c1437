import json
import logging
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from blogcms.config import settings

logger = logging.getLogger(__name__)


class RedisCache:
    """
    Кэш ответов поверх Redis.

    Кэш необязательный: пока клиент не подключен (или Redis недоступен),
    get возвращает None, а set/delete ничего не делают.
    """

    def __init__(self, url: str, enabled: bool = True):
        self._url = url
        self._enabled = enabled
        self._client: Optional[redis.Redis] = None

    async def connect(self):
        if self._enabled and self._client is None:
            self._client = redis.from_url(
                self._url,
                encoding="utf-8",
                decode_responses=True,
            )

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(self, key: str) -> Optional[Any]:
        if self._client is None:
            return None
        try:
            raw_data = await self._client.get(key)
        except RedisError as exc:
            logger.warning("Cache get failed for %s: %s", key, exc)
            return None
        if raw_data is None:
            return None
        return json.loads(raw_data)

    async def set(
            self,
            key: str,
            value: Any,
            ttl: int = 300,
    ):
        if self._client is None:
            return
        try:
            await self._client.setex(key, ttl, json.dumps(value, default=str))
        except RedisError as exc:
            logger.warning("Cache set failed for %s: %s", key, exc)

    async def delete(self, key: str):
        if self._client is None:
            return
        try:
            await self._client.delete(key)
        except RedisError as exc:
            logger.warning("Cache delete failed for %s: %s", key, exc)

    async def ping(self) -> bool:
        """
        Простейшая проверка доступности Redis
        Возвращает True, если пинг прошел, иначе False.
        """
        if self._client is None:
            return False
        try:
            await self._client.ping()
            return True
        except RedisError:
            return False


cache = RedisCache(settings.REDIS_URL, enabled=settings.CACHE_ENABLED)
