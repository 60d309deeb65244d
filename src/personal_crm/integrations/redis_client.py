"""
Redis client wrapper and the follow-up ranking cache.

This module provides:
- A Redis client with connection management and health checking
- PriorityCache, which stores a user's ranking per reference date and
  retires all of a user's entries when their data changes
"""

import logging
from datetime import date
from functools import lru_cache
from typing import Optional

import redis

from personal_crm.core.config import get_settings
from personal_crm.core.exceptions import RedisException
from personal_crm.schemas.scheduling import PriorityListResponse

logger = logging.getLogger("REDIS_CLIENT")


class RedisClient:
    """
    Wrapper class for Redis client.

    Provides a clean interface for Redis operations with
    proper error handling and connection management.
    """

    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        """
        Initialize Redis client.

        Args:
            redis_url: Redis connection URL (defaults to settings)
            client: Pre-built client, used as-is without a ping
        """
        settings = get_settings()
        self.redis_url = redis_url or settings.redis_url

        if client is not None:
            self._client = client
            return

        try:
            self._client = redis.from_url(self.redis_url, decode_responses=True)
            self._client.ping()
            logger.info(f"Redis connected at {self.redis_url}")
        except Exception as e:
            logger.error(f"Redis connection failed: {e}")
            raise RedisException(f"Failed to connect to Redis at {self.redis_url}") from e

    @property
    def client(self) -> redis.Redis:
        return self._client

    def ping(self) -> bool:
        """
        Check Redis connection health.

        Raises:
            RedisException: If ping fails
        """
        try:
            return self._client.ping()
        except Exception as e:
            raise RedisException("Ping check failed") from e

    def get(self, key: str) -> Optional[str]:
        """Get value by key."""
        try:
            return self._client.get(key)
        except Exception as e:
            raise RedisException(f"Failed to get key '{key}'") from e

    def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        """
        Set key-value pair.

        Args:
            key: Redis key
            value: Value to store
            ex: Expiration time in seconds
        """
        try:
            return self._client.set(key, value, ex=ex)
        except Exception as e:
            raise RedisException(f"Failed to set key '{key}'") from e

    def incr(self, key: str) -> int:
        """Atomically increment an integer key, creating it at 1."""
        try:
            return self._client.incr(key)
        except Exception as e:
            raise RedisException(f"Failed to increment key '{key}'") from e

    def delete(self, *keys: str) -> int:
        """Delete one or more keys."""
        if not keys:
            return 0
        try:
            return self._client.delete(*keys)
        except Exception as e:
            raise RedisException("Failed to delete keys") from e

    def scan_keys(self, pattern: str) -> list:
        """All keys matching a glob pattern, via SCAN."""
        try:
            return list(self._client.scan_iter(match=pattern))
        except Exception as e:
            raise RedisException(f"Failed to scan keys matching '{pattern}'") from e


class PriorityCache:
    """
    Ranking cache keyed by user, cache generation and reference date.

    Keys look like `priorities:{user_id}:v{generation}:{YYYY-MM-DD}`. Each
    user has a generation counter at `priorities:version:{user_id}`; any
    write to a user's contacts, interactions or occasions must call
    invalidate_user, which bumps it. A ranking computed under an older
    generation is stored under a key that is never read again.
    """

    KEY_PREFIX = "priorities"

    def __init__(self, client: RedisClient, ttl_seconds: Optional[int] = None):
        self.client = client
        self.ttl_seconds = ttl_seconds or get_settings().priority_cache_ttl_seconds

    def version_key(self, user_id: int) -> str:
        return f"{self.KEY_PREFIX}:version:{user_id}"

    def key_for(self, user_id: int, today: date, version: int = 0) -> str:
        return f"{self.KEY_PREFIX}:{user_id}:v{version}:{today.isoformat()}"

    def current_version(self, user_id: int) -> int:
        """Cache generation for a user; 0 until the first invalidation."""
        raw = self.client.get(self.version_key(user_id))
        return int(raw) if raw is not None else 0

    def get(self, user_id: int, today: date, version: int = 0) -> Optional[PriorityListResponse]:
        raw = self.client.get(self.key_for(user_id, today, version))
        if raw is None:
            return None
        ranking = PriorityListResponse.model_validate_json(raw)
        ranking.cached = True
        return ranking

    def put(self, user_id: int, ranking: PriorityListResponse, version: int = 0) -> None:
        payload = ranking.model_copy(update={"cached": False}).model_dump_json()
        self.client.set(self.key_for(user_id, ranking.today, version), payload, ex=self.ttl_seconds)

    def invalidate_user(self, user_id: int) -> int:
        version = self.client.incr(self.version_key(user_id))
        keys = self.client.scan_keys(f"{self.KEY_PREFIX}:{user_id}:*")
        removed = self.client.delete(*keys)
        logger.debug(f"Invalidated {removed} cached rankings for user {user_id}, now at generation {version}")
        return removed


@lru_cache()
def get_redis_client() -> RedisClient:
    """Shared Redis client singleton."""
    return RedisClient()


def get_priority_cache() -> Optional[PriorityCache]:
    """
    The ranking cache, or None when caching is disabled or Redis is down.
    """
    settings = get_settings()
    if not settings.priority_cache_enabled:
        return None
    try:
        return PriorityCache(get_redis_client(), ttl_seconds=settings.priority_cache_ttl_seconds)
    except RedisException as e:
        logger.warning(f"Ranking cache unavailable, computing fresh: {e.message}")
        return None
