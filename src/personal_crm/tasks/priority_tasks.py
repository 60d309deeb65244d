"""
Celery tasks that recompute follow-up rankings and refresh the cache.

A scheduled run fans out one task per user so a failure for one user
(for example an occasion with an unusable recurrence) leaves the others
untouched.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, Optional
import logging

from celery import Task

from personal_crm.celery_app import celery_app
from personal_crm.core.database import get_session_factory
from personal_crm.integrations import get_priority_cache
from personal_crm.integrations.redis_client import PriorityCache
from personal_crm.repositories import UnitOfWorkFactory
from personal_crm.services.ranking_service import get_ranking
from personal_crm.services.scheduler_service import SchedulerService

logger = logging.getLogger("PRIORITY_TASKS")


class CallbackTask(Task):
    """Base task with logging callbacks."""

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        logger.error(f"Task {task_id} failed: {exc}")

    def on_success(self, retval, task_id, args, kwargs):
        logger.info(f"Task {task_id} completed successfully")


def _parse_today(today_iso: Optional[str]) -> date:
    if today_iso:
        return date.fromisoformat(today_iso)
    return datetime.now(timezone.utc).date()


def refresh_user_ranking(
    uow_factory: UnitOfWorkFactory,
    user_id: int,
    today: date,
    cache: Optional[PriorityCache] = None,
) -> Dict[str, Any]:
    """
    Recompute one user's ranking and overwrite their cache entry.

    Returns:
        dict: Summary with the user id, reference date and ranked contact count
    """
    with uow_factory.create() as uow:
        try:
            ranking = get_ranking(SchedulerService(db=uow.db), user_id, today, cache=cache, refresh=True)
        finally:
            uow.close()

    return {
        "user_id": user_id,
        "today": today.isoformat(),
        "ranked_contacts": ranking.total_count,
        "cached": cache is not None,
    }


def list_user_ids(uow_factory: UnitOfWorkFactory) -> list:
    with uow_factory.create() as uow:
        try:
            return uow.users.list_ids()
        finally:
            uow.close()


@celery_app.task(base=CallbackTask, bind=True, name="tasks.priority_tasks.recompute_user_priorities")
def recompute_user_priorities(self, user_id: int, today_iso: Optional[str] = None):
    """
    Recompute and cache one user's follow-up ranking.

    Args:
        self: Celery task instance (bound)
        user_id: User to rank
        today_iso: Reference date as YYYY-MM-DD; defaults to the current UTC date

    Returns:
        dict: Result summary
    """
    today = _parse_today(today_iso)
    logger.info(f"Recomputing priorities for user {user_id} as of {today.isoformat()} (task {self.request.id})")
    return refresh_user_ranking(UnitOfWorkFactory(get_session_factory()), user_id, today, cache=get_priority_cache())


@celery_app.task(base=CallbackTask, bind=True, name="tasks.priority_tasks.recompute_all_priorities")
def recompute_all_priorities(self, today_iso: Optional[str] = None):
    """
    Queue a ranking recompute for every user.

    Returns:
        dict: Number of users queued and the reference date
    """
    today = _parse_today(today_iso)
    user_ids = list_user_ids(UnitOfWorkFactory(get_session_factory()))
    for user_id in user_ids:
        recompute_user_priorities.delay(user_id, today.isoformat())

    logger.info(f"Queued priority recompute for {len(user_ids)} users as of {today.isoformat()}")
    return {"queued_users": len(user_ids), "today": today.isoformat()}
