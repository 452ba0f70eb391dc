"""
api/dto.py — Pydantic request bodies for the JSON endpoints.

Wire names are camelCase (userRole, countryCode, newPassword); snake_case
field names are accepted as well.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import EmailStr, Field, field_validator

from ..auth.models import Gender, Role
from ..config import COUNTRY_CODE_PATTERN, MOBILE_NUMBER_PATTERN
from ..core.models import CamelModel


def _parse_role(value):
    if value is None or isinstance(value, Role):
        return value
    return Role.parse(value)


# ── Auth ──────────────────────────────────────────────────────────────────────

class RegisterRequest(CamelModel):
    username: str = Field(min_length=1)
    surname: str = Field(min_length=1)
    email: EmailStr
    password: str
    user_role: Role
    country_code: str = Field(pattern=COUNTRY_CODE_PATTERN)
    mobile_number: str = Field(pattern=MOBILE_NUMBER_PATTERN)
    date_of_birth: date
    gender: Gender
    avatar: Optional[str] = None

    @field_validator("user_role", mode="before")
    @classmethod
    def _role(cls, value):
        return _parse_role(value)

    @field_validator("country_code", "mobile_number", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class VerifyOTPRequest(CamelModel):
    email: EmailStr
    otp: str = Field(min_length=1)


class EmailRequest(CamelModel):
    email: EmailStr


class LoginRequest(CamelModel):
    email: EmailStr
    password: str
    role: Optional[Role] = None

    @field_validator("role", mode="before")
    @classmethod
    def _role(cls, value):
        return _parse_role(value)


class ResetPasswordRequest(CamelModel):
    email: EmailStr
    otp: str = Field(min_length=1)
    new_password: str = ""


# ── Products ──────────────────────────────────────────────────────────────────

class ProductRequest(CamelModel):
    name: Any = None
    description: Optional[str] = None
    price: Any = None


# ── Engagement ────────────────────────────────────────────────────────────────

class CommentRequest(CamelModel):
    content: str = ""
