"""
queue/celery_app.py — Celery application configuration.
"""
from __future__ import annotations

from celery import Celery

from ..config import PURGE_INTERVAL_SECONDS, get_settings

REDIS_URL = get_settings().redis_url

celery_app = Celery(
    "teamhub",
    broker=REDIS_URL,
    backend=REDIS_URL,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_routes={
        "teamhub.queue.tasks.deliver_otp_email": {"queue": "mail"},
        "teamhub.queue.tasks.purge_expired_records": {"queue": "maintenance"},
    },
    beat_schedule={
        "purge-expired-records": {
            "task": "teamhub.queue.tasks.purge_expired_records",
            "schedule": PURGE_INTERVAL_SECONDS,
        },
    },
)
