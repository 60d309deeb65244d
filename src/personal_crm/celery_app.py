"""
Celery application configuration for background ranking work.
Uses Redis as both broker and result backend.
"""

from celery import Celery
from celery.schedules import crontab
import logging

from personal_crm.core.config import get_settings

logger = logging.getLogger("CELERY_APP")

settings = get_settings()

celery_app = Celery(
    "personal_crm",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["personal_crm.tasks.priority_tasks"],
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Result backend settings
    result_expires=86400,  # 1 day (in seconds)

    # Task execution settings
    task_acks_late=True,  # Acknowledge task after completion, not before
    task_reject_on_worker_lost=True,  # Requeue tasks if worker dies
    task_track_started=True,

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=200,

    # Timeouts
    task_soft_time_limit=600,
    task_time_limit=900,

    # Logging
    worker_log_format="[%(asctime)s: %(levelname)s/%(processName)s] %(message)s",
    worker_task_log_format="[%(asctime)s: %(levelname)s/%(processName)s][%(task_name)s(%(task_id)s)] %(message)s",

    # Daily warm-up of every user's ranking
    beat_schedule={
        "recompute-all-priorities": {
            "task": "tasks.priority_tasks.recompute_all_priorities",
            "schedule": crontab(hour=settings.priority_recompute_hour, minute=0),
        },
    },
)

logger.info(f"Celery app configured with broker: {settings.celery_broker_url}")
