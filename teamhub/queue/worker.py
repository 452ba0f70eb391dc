"""
queue/worker.py — TeamHub background worker.

Consumes two queues from the Redis broker named by REDIS_URL:
  mail         OTP emails handed off when MAIL_DELIVERY_MODE=queue; each
               send is retried and marks the code `sent` once SendGrid
               accepts it.
  maintenance  purge of expired OTP codes and blacklisted session tokens.

Run with:
  celery -A teamhub.queue.worker worker --loglevel=info -Q mail,maintenance

The purge runs every PURGE_INTERVAL_SECONDS under beat:
  celery -A teamhub.queue.worker beat --loglevel=info
"""
from __future__ import annotations

import logging
import os

from .tasks import deliver_otp_email, purge_expired_records  # noqa: F401
from .celery_app import celery_app  # noqa: F401

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

WORKER_QUEUES = sorted({route["queue"] for route in celery_app.conf.task_routes.values()})
