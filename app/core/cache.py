import json
import logging
from typing import Any, Callable, Optional

import redis

from app.core.config import settings

logger = logging.getLogger(__name__)

_client: Optional[redis.Redis] = None


def get_client() -> Optional[redis.Redis]:
    global _client
    if _client is not None:
        return _client
    if not settings.REDIS_URL:
        return None
    _client = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _client


def cache_get(key: str) -> Optional[Any]:
    client = get_client()
    if client is None:
        return None
    try:
        data = client.get(key)
    except redis.RedisError as e:
        logger.warning(f"Cache read failed for {key}: {e}")
        return None
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        return None


def cache_set(key: str, value: Any, ttl: Optional[int] = None) -> None:
    client = get_client()
    if client is None:
        return
    payload = json.dumps(value, ensure_ascii=False, default=str)
    try:
        client.setex(key, ttl or settings.CACHE_TTL_SECONDS, payload)
    except redis.RedisError as e:
        logger.warning(f"Cache write failed for {key}: {e}")


def cache_delete_prefix(prefix: str) -> None:
    client = get_client()
    if client is None:
        return
    cursor = 0
    pattern = f"{prefix}*"
    try:
        while True:
            cursor, keys = client.scan(cursor=cursor, match=pattern, count=500)
            if keys:
                client.delete(*keys)
            if cursor == 0:
                break
    except redis.RedisError as e:
        logger.warning(f"Cache invalidation failed for {prefix}: {e}")


def cache_get_or_set(key: str, loader: Callable[[], Any], ttl: Optional[int] = None) -> Any:
    """Return the cached value for ``key``, computing and storing it on a miss."""
    cached = cache_get(key)
    if cached is not None:
        logger.debug(f"Cache hit for {key}")
        return cached
    value = loader()
    cache_set(key, value, ttl)
    return value
