"""
core/mailer.py — OTP email templates, SendGrid transport and dispatchers.

Two dispatchers share one interface:
  InlineMailDispatcher: sends on the request path; failures propagate.
  QueuedMailDispatcher: hands the code to the Celery outbox task, which
                        retries and marks the OTP as sent on success.

A code is only marked sent after the transport accepted it; with no
SendGrid key configured it stays `pending`.
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from ..auth import otp_ledger
from ..config import MAIL_MODE_QUEUE, OTP_PURPOSE_PASSWORD_RESET, MailSettings, Settings
from .errors import MailDeliveryError

logger = logging.getLogger(__name__)

_OTP_BLOCK = (
    '<h1 style="background: #f0f0f0; padding: 15px; text-align: center; '
    'letter-spacing: 5px; color: #333;">{otp}</h1>'
)

_VERIFICATION_TEMPLATE = (
    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
    '<h2 style="color: #333;">Email Verification</h2>'
    "<p>Your OTP for account verification is:</p>"
    + _OTP_BLOCK
    + "<p>This OTP will expire in 5 minutes.</p>"
    "<p>If you didn't request this, please ignore this email.</p>"
    "</div>"
)

_PASSWORD_RESET_TEMPLATE = (
    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
    '<h2 style="color: #333; text-align: center;">Password Reset</h2>'
    "<p>We received a request to reset your password. Your OTP for password reset is:</p>"
    + _OTP_BLOCK
    + '<p style="color: #666;">This OTP will expire in 5 minutes.</p>'
    "<p style=\"color: #666;\">If you didn't request this password reset, please ignore this email.</p>"
    '<p style="color: #999; font-size: 12px; text-align: center;">'
    "This is an automated message. Please do not reply to this email.</p>"
    "</div>"
)


def render_otp_email(code: str, purpose: str) -> tuple[str, str]:
    """Return (subject, html) for an OTP of the given purpose."""
    if purpose == OTP_PURPOSE_PASSWORD_RESET:
        return "Password Reset OTP", _PASSWORD_RESET_TEMPLATE.format(otp=code)
    return "Your OTP for Account Verification", _VERIFICATION_TEMPLATE.format(otp=code)


class Mailer:
    """Thin SendGrid wrapper. No retries here; the queue owns retry policy."""

    def __init__(self, settings: MailSettings, client: Optional[SendGridAPIClient] = None):
        self._settings = settings
        self._client = client

    def _get_client(self) -> SendGridAPIClient:
        if self._client is None:
            self._client = SendGridAPIClient(self._settings.sendgrid_api_key)
        return self._client

    def send_otp(self, email: str, code: str, purpose: str) -> bool:
        """Send the OTP email. Returns False when no transport is configured."""
        subject, html = render_otp_email(code, purpose)
        if not self._settings.configured:
            logger.warning("Mail transport not configured; %s OTP for %s: %s", purpose, email, code)
            return False

        message = Mail(
            from_email=self._settings.from_email,
            to_emails=email,
            subject=subject,
            html_content=html,
        )
        try:
            response = self._get_client().send(message)
        except Exception as exc:
            logger.error("SendGrid send failed for %s: %s", email, exc)
            raise MailDeliveryError() from exc
        logger.info("OTP email (%s) sent to %s, status=%s", purpose, email, response.status_code)
        return True


class MailDispatcher(Protocol):
    def dispatch(self, email: str, code: str, purpose: str) -> None: ...


class InlineMailDispatcher:
    def __init__(self, mailer: Mailer):
        self._mailer = mailer

    def dispatch(self, email: str, code: str, purpose: str) -> None:
        if self._mailer.send_otp(email, code, purpose):
            otp_ledger.mark_delivered(email, code)


class QueuedMailDispatcher:
    def dispatch(self, email: str, code: str, purpose: str) -> None:
        from ..queue.tasks import deliver_otp_email

        job = deliver_otp_email.delay(email, code, purpose)
        logger.info("Queued %s OTP email for %s job=%s", purpose, email, job.id)


def build_dispatcher(settings: Settings) -> MailDispatcher:
    if settings.mail.delivery_mode == MAIL_MODE_QUEUE:
        return QueuedMailDispatcher()
    return InlineMailDispatcher(Mailer(settings.mail))
