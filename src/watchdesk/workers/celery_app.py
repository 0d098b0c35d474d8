"""Celery application with the retention sweep on the beat schedule."""

from celery import Celery

from watchdesk.config import settings

celery_app = Celery(
    "watchdesk",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["watchdesk.workers.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    beat_schedule={
        "sweep-expired": {
            "task": "watchdesk.workers.tasks.sweep_expired",
            "schedule": float(settings.sweep_interval_seconds),
        },
    },
)
