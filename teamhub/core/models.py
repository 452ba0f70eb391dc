"""
core/models.py — Pydantic view models returned by the resource services.

Field names are snake_case in Python and camelCase on the wire.
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..auth.models import Role, User
from ..config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Users ─────────────────────────────────────────────────────────────────────

class UserSummary(CamelModel):
    """Role-safe projection used wherever another user is embedded."""
    id: str
    username: str
    surname: str
    email: str
    user_role: Role
    avatar: Optional[str] = None

    @classmethod
    def of(cls, user: User) -> "UserSummary":
        return cls(
            id=user.id,
            username=user.username,
            surname=user.surname,
            email=user.email,
            user_role=user.user_role,
            avatar=user.avatar,
        )


class Profile(CamelModel):
    """Everything about a user except the password hash."""
    id: str
    username: str
    surname: str
    email: str
    user_role: Role
    is_verified: bool
    is_active: bool
    country_code: str
    mobile_number: str
    avatar: Optional[str] = None
    date_of_birth: str
    gender: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def of(cls, user: User) -> "Profile":
        return cls(
            id=user.id,
            username=user.username,
            surname=user.surname,
            email=user.email,
            user_role=user.user_role,
            is_verified=user.is_verified,
            is_active=user.is_active,
            country_code=user.country_code,
            mobile_number=user.mobile_number,
            avatar=user.avatar,
            date_of_birth=user.date_of_birth,
            gender=user.gender,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class AuthResult(CamelModel):
    token: str
    user: Profile


class RegistrationResult(CamelModel):
    email: str
    user_id: str


# ── Pagination ────────────────────────────────────────────────────────────────

class Pagination(CamelModel):
    current_page: int
    per_page: int
    total_records: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, per_page: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / per_page) if per_page else 0
        return cls(
            current_page=page,
            per_page=per_page,
            total_records=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )

    @classmethod
    def empty(cls, page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> "Pagination":
        return cls.build(page, per_page, 0)


def clamp_page(page: Optional[int], limit: Optional[int]) -> tuple[int, int, int]:
    """Return (page, limit, offset) with sane bounds."""
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)
    return page, limit, (page - 1) * limit


# ── Engagement ────────────────────────────────────────────────────────────────

class CommentView(CamelModel):
    id: str
    user: Optional[UserSummary] = None
    content: str
    created_at: datetime


# ── Resources ─────────────────────────────────────────────────────────────────

class BlogView(CamelModel):
    id: str
    title: str
    content: str
    description: str = ""
    thumbnail: Optional[str] = None
    author: Optional[UserSummary] = None
    tags: list[str] = Field(default_factory=list)
    status: str = "draft"
    views: int = 0
    likes: list[str] = Field(default_factory=list)
    likes_count: int = 0
    comments: list[CommentView] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class VideoView(CamelModel):
    id: str
    title: str
    description: str = ""
    video: str
    duration: float = 0
    formatted_duration: str = "0 sec"
    time: str = ""
    author: Optional[UserSummary] = None
    views: int = 0
    likes: list[str] = Field(default_factory=list)
    likes_count: int = 0
    comments: list[CommentView] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ProductView(CamelModel):
    id: str
    name: str
    description: str = ""
    price: float
    owner: Optional[UserSummary] = None
    created_at: datetime
    updated_at: datetime


class TeamView(CamelModel):
    id: str
    name: str
    about: Optional[str] = None
    coach: Optional[UserSummary] = None
    members: list[UserSummary] = Field(default_factory=list)
    photo: Optional[str] = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class LikeResult(CamelModel):
    liked: bool
    likes_count: int
