"""
core/auth_service.py — Registration, OTP verification, login, password reset
and logout.

All secrets arrive through the Settings object handed to the constructor;
the three stores (users, otp_ledger, blacklist) are plain module functions
over the shared SQLite database.
"""
from __future__ import annotations

import logging
import re
import sqlite3
from datetime import date, datetime
from typing import Callable, Optional

from ..auth import blacklist, otp_ledger, users
from ..auth.models import Gender, OTPRecord, Role, User, utcnow
from ..auth.token_utils import (
    SessionSigner,
    TokenInvalid,
    generate_otp,
    hash_password,
    verify_password,
)
from ..config import (
    COUNTRY_CODE_PATTERN,
    MOBILE_NUMBER_PATTERN,
    OTP_PURPOSE_PASSWORD_RESET,
    OTP_PURPOSE_VERIFICATION,
    PASSWORD_MIN_LENGTH,
    Settings,
)
from .errors import (
    ConflictError,
    NotFoundError,
    OTPExpiredError,
    UnauthorizedError,
    ValidationError,
)
from .mailer import MailDispatcher
from .models import AuthResult, Profile, RegistrationResult

logger = logging.getLogger(__name__)


def _parse_birth_date(value) -> str:
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(str(value).strip()).isoformat()
    except ValueError as exc:
        raise ValidationError("Date of birth must be a valid YYYY-MM-DD date") from exc


class AuthService:
    def __init__(
        self,
        settings: Settings,
        dispatcher: MailDispatcher,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._settings = settings
        self._dispatcher = dispatcher
        self._clock = clock
        self._signer = SessionSigner(settings.token_secret)

    # ── Registration ──────────────────────────────────────────────────────────

    def register(
        self,
        *,
        username: str,
        surname: str,
        email: str,
        password: str,
        user_role: Role,
        country_code: str,
        mobile_number: str,
        date_of_birth: str,
        gender: str,
        avatar: Optional[str] = None,
    ) -> RegistrationResult:
        """
        Create an unverified account and mail it a verification code.

        A verified account with the same email is a conflict; an unverified
        one is treated as abandoned and replaced together with its pending OTP.
        """
        self._check_password(password)
        email = users.normalize_email(email)

        existing = users.get_user_by_email(email)
        if existing:
            if existing.is_verified:
                raise ConflictError("User already exists")
            logger.info("Purging unverified account %s before re-registration", email)
            otp_ledger.delete_otps_for(email)
            users.delete_user(existing.id)

        try:
            user = users.create_user(
                username=username,
                surname=surname,
                email=email,
                password_hash=hash_password(password),
                user_role=user_role,
                country_code=country_code,
                mobile_number=mobile_number,
                date_of_birth=date_of_birth,
                gender=gender,
                avatar=avatar,
            )
        except sqlite3.IntegrityError as exc:
            raise ConflictError("User already exists") from exc

        self._issue_and_send(email, OTP_PURPOSE_VERIFICATION)
        logger.info("Registered user %s role=%s", user.id, user.user_role.value)
        return RegistrationResult(email=user.email, user_id=user.id)

    def verify_otp(self, email: str, code: str) -> AuthResult:
        record = self._lookup_otp(email, code, OTP_PURPOSE_VERIFICATION)
        if not otp_ledger.consume_otp(record.id):
            raise ValidationError("Invalid OTP")

        user = users.get_user_by_email(email)
        if not user:
            raise NotFoundError("User not found")
        users.mark_verified(user.id)
        logger.info("Verified email for user %s", user.id)
        return self._session_for(user.id)

    def resend_otp(self, email: str) -> None:
        user = users.get_user_by_email(email)
        if not user:
            raise NotFoundError("User not found")
        if user.is_verified and not self._settings.allow_resend_when_verified:
            raise ValidationError("User already verified")
        self._issue_and_send(user.email, OTP_PURPOSE_VERIFICATION)

    # ── Login ─────────────────────────────────────────────────────────────────

    def login(self, email: str, password: str, role: Optional[Role] = None) -> AuthResult:
        user = users.get_user_by_email(email)
        if not user:
            raise UnauthorizedError("Invalid email or password")
        if not user.is_verified:
            raise ValidationError("Please verify your email first")
        if not verify_password(password, user.password_hash):
            logger.info("Failed login for user %s", user.id)
            raise UnauthorizedError("Invalid email or password")
        if role is not None and Role.parse(role) is not user.user_role:
            raise UnauthorizedError("Invalid role for this account")
        return self._session_for(user.id, user)

    # ── Password reset ────────────────────────────────────────────────────────

    def forgot_password(self, email: str) -> str:
        user = users.get_user_by_email(email)
        if not user:
            raise NotFoundError("User not found with this email address")
        if not user.is_verified:
            raise ValidationError("Please verify your email first")
        self._issue_and_send(user.email, OTP_PURPOSE_PASSWORD_RESET)
        return user.email

    def verify_password_reset_otp(self, email: str, code: str) -> None:
        """Check a reset code without consuming it."""
        self._lookup_otp(email, code, OTP_PURPOSE_PASSWORD_RESET)

    def reset_password(self, email: str, code: str, new_password: str) -> AuthResult:
        self._check_password(new_password)
        record = self._lookup_otp(email, code, OTP_PURPOSE_PASSWORD_RESET)

        user = users.get_user_by_email(email)
        if not user:
            raise NotFoundError("User not found")
        if not otp_ledger.consume_otp(record.id):
            raise ValidationError("Invalid OTP")
        users.update_password(user.id, hash_password(new_password))
        logger.info("Password reset for user %s", user.id)
        return self._session_for(user.id)

    # ── Sessions ──────────────────────────────────────────────────────────────

    def authenticate(self, token: str) -> User:
        """Resolve a bearer token to its user or raise UnauthorizedError."""
        if blacklist.is_blacklisted(token):
            raise UnauthorizedError("Token is blacklisted. Please login again.")
        try:
            user_id = self._signer.read(token)
        except TokenInvalid as exc:
            raise UnauthorizedError("Not authorized, token failed") from exc
        user = users.get_user_by_id(user_id)
        if not user:
            raise UnauthorizedError("Not authorized, user not found")
        return user

    def logout(self, token: Optional[str]) -> None:
        if not token:
            raise UnauthorizedError("No token provided")
        blacklist.blacklist_token(token)
        logger.info("Session token revoked")

    # ── Profile ───────────────────────────────────────────────────────────────

    def get_profile(self, user_id: str) -> Profile:
        user = users.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return Profile.of(user)

    def update_profile(self, user: User, fields: dict) -> Profile:
        """Apply a partial profile update under the same rules registration enforces."""
        changes = {k: v for k, v in fields.items() if v is not None}
        for key in ("username", "surname"):
            if key in changes:
                changes[key] = str(changes[key]).strip()
                if not changes[key]:
                    raise ValidationError(f"{key.capitalize()} cannot be empty")
        if "country_code" in changes:
            changes["country_code"] = str(changes["country_code"]).strip()
            if not re.fullmatch(COUNTRY_CODE_PATTERN, changes["country_code"]):
                raise ValidationError("Country code must look like +1 to +9999")
        if "mobile_number" in changes:
            changes["mobile_number"] = str(changes["mobile_number"]).strip()
            if not re.fullmatch(MOBILE_NUMBER_PATTERN, changes["mobile_number"]):
                raise ValidationError("Mobile number must be exactly 10 digits")
        if "date_of_birth" in changes:
            changes["date_of_birth"] = _parse_birth_date(changes["date_of_birth"])
        if "gender" in changes:
            try:
                changes["gender"] = Gender(changes["gender"]).value
            except ValueError as exc:
                raise ValidationError("Invalid gender") from exc
        return Profile.of(users.update_profile(user.id, changes))

    # ── Private helpers ───────────────────────────────────────────────────────

    def _check_password(self, password: str) -> None:
        if not password or len(password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
            )

    def _issue_and_send(self, email: str, purpose: str) -> OTPRecord:
        code = generate_otp(self._settings.otp_length)
        record = otp_ledger.issue_otp(email, code, purpose)
        self._dispatcher.dispatch(email, code, purpose)
        return record

    def _lookup_otp(self, email: str, code: str, purpose: str) -> OTPRecord:
        """
        Find the live (email, code) record for `purpose`.

        A missing or mismatched code is Invalid. A stale record is deleted
        before failing as expired.
        """
        record = otp_ledger.find_otp(email, code)
        if record is None:
            raise ValidationError("Invalid OTP")
        if record.purpose != purpose:
            if purpose == OTP_PURPOSE_PASSWORD_RESET:
                raise ValidationError("Invalid OTP for password reset")
            raise ValidationError("Invalid OTP")
        if record.is_expired(self._clock()):
            otp_ledger.consume_otp(record.id)
            raise OTPExpiredError("OTP has expired")
        return record

    def _session_for(self, user_id: str, user: Optional[User] = None) -> AuthResult:
        user = users.get_user_by_id(user_id) if user is None else user
        return AuthResult(token=self._signer.issue(user_id), user=Profile.of(user))
