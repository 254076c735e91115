"""
Celery configuration for background tasks.
"""

from celery import Celery

from vaxsync.config import get_settings

settings = get_settings()

celery_app = Celery(
    "vaxsync",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.CELERY_TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    beat_schedule={
        "reconcile-reserved-doses": {
            "task": "inventory.reconcile_reserved",
            "schedule": settings.RESERVED_RECONCILE_MINUTES * 60.0,
        },
    },
)

# Discover tasks in vaxsync/tasks/
celery_app.autodiscover_tasks(["vaxsync.tasks"], related_name="inventory_tasks")
