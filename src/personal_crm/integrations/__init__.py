"""
External service integrations package.

This package contains client wrappers for external services:
- Redis: ranking cache for follow-up priorities

Usage:
    from personal_crm.integrations import get_priority_cache

    cache = get_priority_cache()
    if cache is not None:
        cache.invalidate_user(user_id)
"""

from personal_crm.integrations.redis_client import (
    RedisClient,
    PriorityCache,
    get_redis_client,
    get_priority_cache,
)

__all__ = [
    "RedisClient",
    "PriorityCache",
    "get_redis_client",
    "get_priority_cache",
]
