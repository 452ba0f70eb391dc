"""
core/user_admin.py — Listing users by role and removing accounts.
"""
from __future__ import annotations

import logging
from typing import Optional

from ..auth import otp_ledger, users
from ..auth.models import Role, User
from .errors import ForbiddenError, NotFoundError, ValidationError
from .models import Pagination, Profile, clamp_page
from .policy import can_delete_users

logger = logging.getLogger(__name__)

LISTABLE_ROLES = (Role.PLAYER, Role.COACH, Role.PARENT)


def list_users(
    role: Optional[str],
    *,
    is_active: Optional[bool] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> tuple[list[Profile], Pagination]:
    try:
        parsed = Role.parse(role) if role else None
    except ValueError:
        parsed = None
    if parsed not in LISTABLE_ROLES:
        raise ValidationError("Invalid or missing role. Must be player, coach or parent")

    page, limit, offset = clamp_page(page, limit)
    found, total = users.list_users_by_role(parsed, is_active=is_active, offset=offset, limit=limit)
    return [Profile.of(u) for u in found], Pagination.build(page, limit, total)


def delete_user(current: User, user_id: str) -> str:
    """Remove an account outright. Returns the removed user's full name."""
    if not can_delete_users(current):
        raise ForbiddenError("Access denied. Only coaches and admins can delete users.")
    target = users.get_user_by_id(user_id)
    if not target:
        raise NotFoundError("User not found")
    if target.id == current.id:
        raise ValidationError("You cannot delete your own account")

    otp_ledger.delete_otps_for(target.email)
    users.delete_user(target.id)
    logger.info("User %s deleted by %s", target.id, current.id)
    return target.full_name
