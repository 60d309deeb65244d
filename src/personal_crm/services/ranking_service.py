"""
Ranking Service

Serves a user's follow-up ranking through the optional Redis cache.
The cache is best-effort: a Redis failure is logged and the ranking is
computed fresh, while scheduler errors propagate unchanged.
"""

import logging
from datetime import date
from typing import Optional

from personal_crm.core.exceptions import RedisException
from personal_crm.integrations.redis_client import PriorityCache
from personal_crm.schemas.scheduling import PriorityListResponse
from personal_crm.services.scheduler_service import SchedulerService

logger = logging.getLogger("RANKING_SERVICE")


def get_ranking(
    scheduler: SchedulerService,
    user_id: int,
    today: date,
    cache: Optional[PriorityCache] = None,
    refresh: bool = False,
) -> PriorityListResponse:
    """
    Ranking for `user_id` as of `today`, from cache when possible.

    Args:
        scheduler: Scheduler bound to a database session
        user_id: Owning user
        today: Reference date
        cache: Ranking cache, or None to always compute
        refresh: Skip the cache lookup and overwrite the stored entry

    Returns:
        PriorityListResponse, with `cached` set when served from Redis
    """
    version = 0
    if cache is not None:
        try:
            # Read before computing so a put racing an invalidation lands
            # under a stale generation
            version = cache.current_version(user_id)
        except RedisException as e:
            logger.warning(f"Ranking cache unavailable for user {user_id}: {e.message}")
            cache = None

    if cache is not None and not refresh:
        try:
            cached = cache.get(user_id, today, version)
        except RedisException as e:
            logger.warning(f"Ranking cache read failed for user {user_id}: {e.message}")
            cached = None
        if cached is not None:
            logger.debug(f"Serving cached ranking for user {user_id} as of {today.isoformat()}")
            return cached

    ranking = PriorityListResponse.from_entries(today, scheduler.recompute_priorities(user_id, today))

    if cache is not None:
        try:
            cache.put(user_id, ranking, version)
        except RedisException as e:
            logger.warning(f"Ranking cache write failed for user {user_id}: {e.message}")
    return ranking


def invalidate_ranking(cache: Optional[PriorityCache], user_id: int) -> None:
    """Drop a user's cached rankings after their data changed."""
    if cache is None:
        return
    try:
        cache.invalidate_user(user_id)
    except RedisException as e:
        logger.warning(f"Ranking cache invalidation failed for user {user_id}: {e.message}")
