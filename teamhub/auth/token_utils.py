"""
auth/token_utils.py — OTP codes, signed session tokens and password hashing.
"""
from __future__ import annotations

import secrets
from typing import Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from passlib.context import CryptContext

from ..config import SESSION_SALT, SESSION_TTL_SECONDS

TOKEN_ID_BYTES: int = 8

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenInvalid(Exception):
    """Signature mismatch, malformed payload or expired token."""


def generate_otp(length: int = 6) -> str:
    """Numeric code of exactly `length` digits (leading zeros allowed)."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Constant-time check against a stored bcrypt hash."""
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        return False


class SessionSigner:
    """Issues and reads 48-hour bearer tokens carrying the user id."""

    def __init__(self, secret: str, max_age: int = SESSION_TTL_SECONDS):
        self._serializer = URLSafeTimedSerializer(secret, salt=SESSION_SALT)
        self.max_age = max_age

    def issue(self, user_id: str) -> str:
        return self._serializer.dumps({"id": user_id, "jti": secrets.token_hex(TOKEN_ID_BYTES)})

    def read(self, token: str) -> str:
        """Return the user id in `token` or raise TokenInvalid."""
        try:
            payload = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired as exc:
            raise TokenInvalid("Token expired") from exc
        except BadSignature as exc:
            raise TokenInvalid("Bad signature") from exc

        user_id: Optional[str] = payload.get("id") if isinstance(payload, dict) else None
        if not user_id:
            raise TokenInvalid("Token carries no user id")
        return user_id
