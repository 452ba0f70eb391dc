"""
test_users.py — User directory and account removal.
"""
from __future__ import annotations

import pytest

from teamhub.auth import otp_ledger, users
from teamhub.auth.models import Role
from teamhub.core import user_admin
from teamhub.core.errors import ForbiddenError, NotFoundError, ValidationError


def test_list_users_by_role(make_user):
    make_user(role=Role.PLAYER)
    make_user(role=Role.PLAYER, is_verified=True)
    make_user(role=Role.COACH)

    found, pagination = user_admin.list_users("player")
    assert pagination.total_records == 2
    assert all(u.user_role is Role.PLAYER for u in found)


@pytest.mark.parametrize("role", [None, "", "admin", "captain"])
def test_list_users_rejects_other_roles(role):
    with pytest.raises(ValidationError, match="Invalid or missing role"):
        user_admin.list_users(role)


def test_coach_deletes_user(make_user):
    coach = make_user(role=Role.COACH)
    target = make_user(role=Role.PLAYER)
    otp_ledger.issue_otp(target.email, "123456", "password_reset")

    name = user_admin.delete_user(coach, target.id)

    assert name == target.full_name
    assert users.get_user_by_id(target.id) is None
    assert otp_ledger.latest_otp(target.email) is None


def test_player_cannot_delete(make_user):
    with pytest.raises(ForbiddenError):
        user_admin.delete_user(make_user(role=Role.PLAYER), make_user().id)


def test_cannot_delete_self(make_user):
    admin = make_user(role=Role.ADMIN)
    with pytest.raises(ValidationError, match="own account"):
        user_admin.delete_user(admin, admin.id)


def test_delete_missing_user(make_user):
    with pytest.raises(NotFoundError):
        user_admin.delete_user(make_user(role=Role.ADMIN), "missing")


def test_all_user_endpoint(client, make_user, headers_for):
    viewer = make_user(role=Role.PARENT)
    make_user(role=Role.COACH)
    resp = client.get("/api/users/allUser?role=coach&isActive=true", headers=headers_for(viewer))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["pagination"]["totalRecords"] == 1
    assert data["users"][0]["userRole"] == "Coach"
    assert "passwordHash" not in data["users"][0]

    resp = client.get("/api/users/allUser", headers=headers_for(viewer))
    assert resp.status_code == 400


def test_delete_endpoint_requires_staff(client, make_user, headers_for):
    target = make_user()
    resp = client.delete(f"/api/users/delete/{target.id}", headers=headers_for(make_user(role=Role.PARENT)))
    assert resp.status_code == 403
    assert resp.json()["message"] == "Access denied. Only coaches and admins can delete users."

    resp = client.delete(f"/api/users/delete/{target.id}", headers=headers_for(make_user(role=Role.ADMIN)))
    assert resp.status_code == 200
    assert target.full_name in resp.json()["message"]
