"""
api/routes_users.py — User directory by role and account removal.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..auth.models import User
from ..core import user_admin
from .dependencies import get_current_user, require_staff
from .errors import paged, success_response

router = APIRouter()


@router.get("/api/users/allUser")
async def list_users(
    role: Optional[str] = Query(default=None),
    is_active: Optional[bool] = Query(default=None, alias="isActive"),
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    user: User = Depends(get_current_user),
):
    items, pagination = user_admin.list_users(role, is_active=is_active, page=page, limit=limit)
    return success_response("Users fetched successfully", paged(items, pagination, "users"))


@router.delete("/api/users/delete/{user_id}")
async def delete_user(user_id: str, user: User = Depends(require_staff)):
    name = user_admin.delete_user(user, user_id)
    return success_response(f"User {name} deleted successfully")
