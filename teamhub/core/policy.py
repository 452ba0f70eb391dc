"""
core/policy.py — Ownership and role checks shared by the resource services.
"""
from __future__ import annotations

from ..auth.models import Role, User
from .errors import ForbiddenError


def require_owner(owner_id: str, user: User, noun: str, action: str) -> None:
    if owner_id != user.id:
        raise ForbiddenError(f"Not authorized to {action} this {noun}")


def is_admin(user: User) -> bool:
    return user.user_role is Role.ADMIN


def can_manage_team(user: User, coach_id: str) -> bool:
    """Admins manage every team; a coach manages the teams they coach."""
    return is_admin(user) or (user.user_role is Role.COACH and user.id == coach_id)


def can_delete_users(user: User) -> bool:
    return user.user_role in (Role.COACH, Role.ADMIN)
