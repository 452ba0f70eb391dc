"""
queue/tasks.py — Celery tasks: OTP mail outbox and TTL housekeeping.

deliver_otp_email sends a code persisted as `pending` and marks it `sent`.
A code that was consumed or superseded before delivery is skipped.
"""
from __future__ import annotations

import logging

from celery import Task

from ..config import MAIL_RETRY_ATTEMPTS, MAIL_RETRY_DELAY
from .celery_app import celery_app

logger = logging.getLogger(__name__)


class BaseWorkerTask(Task):
    abstract = True

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        logger.error(
            "Task %s[%s] failed: %s",
            self.name, task_id, exc, exc_info=einfo,
        )


@celery_app.task(
    name="teamhub.queue.tasks.deliver_otp_email",
    bind=True,
    base=BaseWorkerTask,
    max_retries=MAIL_RETRY_ATTEMPTS,
    default_retry_delay=MAIL_RETRY_DELAY,
)
def deliver_otp_email(self, email: str, code: str, purpose: str) -> str:
    """
    Send one OTP email.

    Returns:
        "sent", "skipped" when the code is no longer live, or
        "unconfigured" when no mail transport is set up.
    """
    from ..auth import otp_ledger
    from ..config import get_settings
    from ..core.errors import MailDeliveryError
    from ..core.mailer import Mailer

    if otp_ledger.find_otp(email, code) is None:
        logger.info("OTP for %s no longer live; skipping delivery", email)
        return "skipped"

    try:
        delivered = Mailer(get_settings().mail).send_otp(email, code, purpose)
    except MailDeliveryError as exc:
        logger.warning("OTP delivery to %s failed (attempt %d)", email, self.request.retries + 1)
        raise self.retry(exc=exc)

    if not delivered:
        return "unconfigured"
    otp_ledger.mark_delivered(email, code)
    return "sent"


@celery_app.task(
    name="teamhub.queue.tasks.purge_expired_records",
    base=BaseWorkerTask,
)
def purge_expired_records() -> dict:
    from ..core.maintenance import purge_expired_records as purge

    return purge()
