from .celery_app import celery_app
from .tasks import deliver_otp_email, purge_expired_records

__all__ = ["celery_app", "deliver_otp_email", "purge_expired_records"]
