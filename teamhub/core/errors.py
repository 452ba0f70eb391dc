"""
core/errors.py — Service-level failures, one class per HTTP outcome.

Services raise these; the app factory renders them into the response envelope.
"""
from __future__ import annotations

from typing import Any, Optional


class ServiceError(Exception):
    status_code: int = 500
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(ServiceError):
    status_code = 400
    default_message = "Validation failed"


class ConflictError(ServiceError):
    status_code = 400
    default_message = "Resource already exists"


class OTPExpiredError(ServiceError):
    status_code = 400
    default_message = "OTP has expired"


class UnauthorizedError(ServiceError):
    status_code = 401
    default_message = "Not authorized"


class ForbiddenError(ServiceError):
    status_code = 403
    default_message = "Insufficient permissions"


class NotFoundError(ServiceError):
    status_code = 404
    default_message = "Not found"


class MailDeliveryError(ServiceError):
    status_code = 500
    default_message = "Email sending failed"
