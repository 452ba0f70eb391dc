"""
auth/models.py — Pure-Python dataclass models for auth entities.
No ORM dependency; raw sqlite3 rows are mapped here.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from ..config import OTP_TTL_SECONDS


class Role(str, Enum):
    COACH = "Coach"
    PARENT = "Parent"
    PLAYER = "Player"
    ADMIN = "Admin"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Case-insensitive lookup; raises ValueError for anything outside the set."""
        if isinstance(value, cls):
            return value
        wanted = str(value).strip().lower()
        for role in cls:
            if role.value.lower() == wanted:
                return role
        raise ValueError(f"Invalid role '{value}'. Must be one of: {', '.join(r.value for r in cls)}")


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def iso(value: datetime) -> str:
    """Fixed-width UTC ISO string so stored timestamps compare lexically."""
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_ts(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


@dataclass
class User:
    id: str
    username: str
    surname: str
    email: str
    password_hash: str
    user_role: Role
    country_code: str
    mobile_number: str
    date_of_birth: str
    gender: str
    is_verified: bool = False
    is_active: bool = True
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "User":
        return cls(
            id=row["id"],
            username=row["username"],
            surname=row["surname"],
            email=row["email"],
            password_hash=row["password_hash"],
            user_role=Role(row["user_role"]),
            country_code=row["country_code"],
            mobile_number=row["mobile_number"],
            date_of_birth=row["date_of_birth"],
            gender=row["gender"],
            is_verified=bool(row["is_verified"]),
            is_active=bool(row["is_active"]),
            avatar=row["avatar"],
            created_at=parse_ts(row["created_at"]),
            updated_at=parse_ts(row["updated_at"]),
        )

    @property
    def full_name(self) -> str:
        return f"{self.username} {self.surname}"


@dataclass
class OTPRecord:
    id: int
    email: str
    otp: str
    purpose: str
    delivery_status: str
    created_at: datetime

    @classmethod
    def from_row(cls, row) -> "OTPRecord":
        return cls(
            id=row["id"],
            email=row["email"],
            otp=row["otp"],
            purpose=row["purpose"],
            delivery_status=row["delivery_status"],
            created_at=parse_ts(row["created_at"]),
        )

    def is_expired(self, now: datetime) -> bool:
        return now > self.created_at + timedelta(seconds=OTP_TTL_SECONDS)
