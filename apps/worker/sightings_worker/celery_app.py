"""Celery application configuration."""

from celery import Celery

from sightings_api.settings import get_settings

settings = get_settings()

celery_app = Celery(
    "sightings_worker",
    broker=settings.redis_url,
    backend=settings.redis_url,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=10 * 60,  # 10 minutes
    task_soft_time_limit=8 * 60,  # 8 minutes
    beat_schedule={
        "expire-pending-sightings": {
            "task": "sightings_worker.tasks.expire_pending_sightings",
            "schedule": float(settings.expiry_interval_seconds),
        },
    },
)

# Import tasks to register them with Celery
# This must be done after celery_app is created
from sightings_worker import tasks  # noqa: F401, E402
