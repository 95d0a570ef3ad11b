"""Read-through cache for dashboard summaries.

Redis is used when ``REDIS_URL`` is set and reachable; otherwise values live
in a per-process TTL cache. Cache errors never fail a request.
"""

import json
from typing import Any, Optional
from cachetools import TTLCache
import redis
from ecofreight.core_settings import get_settings
from shared.core import get_logger

logger = get_logger(__name__)
settings = get_settings()

DASHBOARD_PREFIX = "dashboard:"

redis_client: Optional[redis.Redis] = None
local_cache: TTLCache = TTLCache(maxsize=1024, ttl=settings.CACHE_TTL_SECONDS)

def init_cache() -> None:
    global redis_client
    if not settings.REDIS_URL:
        redis_client = None
        return
    try:
        redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        redis_client.ping()
        logger.info("Redis cache connected")
    except Exception as e:
        logger.warning(f"Redis unavailable, using in-process cache: {e}")
        redis_client = None

def cache_get(key: str) -> Any:
    if redis_client:
        try:
            val = redis_client.get(key)
            if val is not None:
                return json.loads(val)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}: {e}")
    return local_cache.get(key)

def cache_set(key: str, value: Any, ttl: Optional[int] = None) -> None:
    ttl = ttl or settings.CACHE_TTL_SECONDS
    if redis_client:
        try:
            redis_client.setex(key, ttl, json.dumps(value, default=str))
            return
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")
    local_cache[key] = value

def cache_delete_prefix(prefix: str) -> None:
    for key in tuple(local_cache.keys()):
        if key.startswith(prefix):
            local_cache.pop(key, None)
    if redis_client:
        try:
            for key in redis_client.scan_iter(match=f"{prefix}*"):
                redis_client.delete(key)
        except Exception as e:
            logger.warning(f"Cache purge failed for {prefix}: {e}")

def invalidate_dashboards() -> None:
    cache_delete_prefix(DASHBOARD_PREFIX)
