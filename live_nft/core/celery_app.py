"""
Celery Application Configuration

For deployments that run the updater as a Celery worker plus beat instead
of the in-process ``--cron`` mode:

    celery -A live_nft.core.celery_app worker --beat --concurrency=1

The beat schedule is built from CRON_TIME in the configured CRON_TIMEZONE.
"""

from celery import Celery

from live_nft.core.config import get_settings
from live_nft.pipeline.scheduler import cron_schedule

settings = get_settings()

# Create Celery app
celery_app = Celery(
    "live_nft",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=[
        "live_nft.pipeline.worker",
    ]
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.CRON_TIMEZONE,
    enable_utc=True,

    # Task tracking
    task_track_started=True,
    task_time_limit=600,  # 10 minute hard limit
    task_soft_time_limit=540,  # 9 minute soft limit

    # Result expiration
    result_expires=86400,  # 24 hours

    # One update at a time: the token is a single shared record
    worker_prefetch_multiplier=1,
    worker_concurrency=1,

    # A failed update is not redelivered
    task_acks_late=False,
)


def build_beat_schedule(cron_time):
    """Beat entry for the token update, empty when CRON_TIME is unset."""
    if not cron_time:
        return {}
    return {
        "update-token": {
            "task": "live_nft.pipeline.worker.update_token_task",
            "schedule": cron_schedule(cron_time, app=celery_app),
        },
    }


celery_app.conf.beat_schedule = build_beat_schedule(settings.CRON_TIME)
