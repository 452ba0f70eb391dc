"""
core/teams.py — Team management.

Policy:
  create         Admin, or the named coach for themself.
  update/delete  Admin, or the team's own coach.
  list           Admin sees all, Coach sees own teams, others get an empty page.
  get            Admin, the team's coach, or a member.
Members must exist and hold the Player role when they are added.
"""
from __future__ import annotations

import logging
import uuid
from typing import Iterable, Optional

from ..auth import users
from ..auth.models import Role, User, iso, parse_ts, utcnow
from ..auth.sqlite_db import get_conn
from .errors import ForbiddenError, NotFoundError, ValidationError
from .models import Pagination, TeamView, UserSummary, clamp_page
from .policy import can_manage_team, is_admin

logger = logging.getLogger(__name__)


def _dedupe(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(str(i).strip() for i in ids if str(i).strip()))


def validate_members(member_ids: Iterable[str]) -> list[str]:
    """
    Return the de-duplicated member ids, or raise ValidationError whose
    details name every offending id in request order. Unknown ids carry
    role None, non-players carry their role.
    """
    ids = _dedupe(member_ids)
    if not ids:
        return ids
    found = users.get_users_by_ids(ids)

    invalid = []
    has_unknown = False
    for member_id in ids:
        member = found.get(member_id)
        if member is None:
            has_unknown = True
            invalid.append({"id": member_id, "role": None})
        elif member.user_role is not Role.PLAYER:
            invalid.append({"id": member_id, "role": member.user_role.value})

    if invalid:
        message = (
            "Some member IDs are invalid"
            if has_unknown
            else "Only users with role 'Player' can be added as team members"
        )
        raise ValidationError(
            message,
            details={"invalidCount": len(invalid), "invalidMembers": invalid},
        )
    return ids


def _load_row(team_id: str):
    with get_conn() as conn:
        row = conn.execute("SELECT * FROM teams WHERE id = ?", (team_id,)).fetchone()
    if not row:
        raise NotFoundError("Team not found")
    return row


def _member_ids(conn, team_id: str) -> list[str]:
    rows = conn.execute(
        "SELECT user_id FROM team_members WHERE team_id = ? ORDER BY position", (team_id,)
    ).fetchall()
    return [r["user_id"] for r in rows]


def _views_for(rows) -> list[TeamView]:
    with get_conn() as conn:
        members = {r["id"]: _member_ids(conn, r["id"]) for r in rows}
    people = users.get_users_by_ids(
        [r["coach_id"] for r in rows] + [m for ids in members.values() for m in ids]
    )
    views = []
    for r in rows:
        coach = people.get(r["coach_id"])
        views.append(
            TeamView(
                id=r["id"],
                name=r["name"],
                about=r["about"],
                coach=UserSummary.of(coach) if coach else None,
                members=[UserSummary.of(people[m]) for m in members[r["id"]] if m in people],
                photo=r["photo"],
                is_active=bool(r["is_active"]),
                created_at=parse_ts(r["created_at"]),
                updated_at=parse_ts(r["updated_at"]),
            )
        )
    return views


def _view(team_id: str) -> TeamView:
    return _views_for([_load_row(team_id)])[0]


def _replace_members(conn, team_id: str, member_ids: list[str]) -> None:
    conn.execute("DELETE FROM team_members WHERE team_id = ?", (team_id,))
    conn.executemany(
        "INSERT INTO team_members (team_id, user_id, position) VALUES (?, ?, ?)",
        [(team_id, uid, pos) for pos, uid in enumerate(member_ids)],
    )


def _require_manager(current: User, row, action: str) -> None:
    if not can_manage_team(current, row["coach_id"]):
        raise ForbiddenError(f"Unauthorized: Only Admin or the team's coach can {action} this team")


def create_team(
    current: User,
    *,
    name: Optional[str],
    coach_id: Optional[str],
    about: Optional[str] = None,
    member_ids: Iterable[str] = (),
    photo: Optional[str] = None,
) -> TeamView:
    if not (name or "").strip() or not (coach_id or "").strip():
        raise ValidationError("Team name and coach are required")
    if not is_admin(current) and current.id != coach_id:
        raise ForbiddenError("Unauthorized: Coach can only select themself")

    coach = users.get_user_by_id(coach_id)
    if not coach:
        raise NotFoundError("Coach not found")
    if coach.user_role is not Role.COACH:
        raise ValidationError("Provided user is not a Coach")

    members = validate_members(member_ids)

    team_id = str(uuid.uuid4())
    now = iso(utcnow())
    with get_conn() as conn:
        conn.execute(
            """
            INSERT INTO teams (id, name, about, coach_id, photo, is_active, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, 1, ?, ?)
            """,
            (team_id, name.strip(), about, coach_id, photo, now, now),
        )
        _replace_members(conn, team_id, members)
        conn.commit()
    logger.info("Team %s created by %s with %d members", team_id, current.id, len(members))
    return _view(team_id)


def list_teams(
    current: User,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> tuple[list[TeamView], Pagination]:
    page, limit, offset = clamp_page(page, limit)
    if is_admin(current):
        where, params = "1 = 1", []
    elif current.user_role is Role.COACH:
        where, params = "coach_id = ?", [current.id]
    else:
        return [], Pagination.empty(page, limit)

    with get_conn() as conn:
        total = conn.execute(f"SELECT COUNT(*) FROM teams WHERE {where}", params).fetchone()[0]
        rows = conn.execute(
            f"SELECT * FROM teams WHERE {where} ORDER BY created_at DESC LIMIT ? OFFSET ?",
            (*params, limit, offset),
        ).fetchall()
    return _views_for(rows), Pagination.build(page, limit, total)


def get_team(current: User, team_id: str) -> TeamView:
    team = _view(team_id)
    allowed = (
        can_manage_team(current, team.coach.id if team.coach else "")
        or any(m.id == current.id for m in team.members)
    )
    if not allowed:
        raise ForbiddenError("Unauthorized: You can only view teams you are associated with")
    return team


def update_team(
    current: User,
    team_id: str,
    *,
    name: Optional[str] = None,
    about: Optional[str] = None,
    member_ids: Optional[Iterable[str]] = None,
    photo: Optional[str] = None,
) -> TeamView:
    row = _load_row(team_id)
    _require_manager(current, row, "update")

    members = validate_members(member_ids) if member_ids is not None else None
    changes = {}
    if name is not None:
        if not name.strip():
            raise ValidationError("Team name cannot be empty")
        changes["name"] = name.strip()
    if about is not None:
        changes["about"] = about
    if photo is not None:
        changes["photo"] = photo

    with get_conn() as conn:
        assignments = "".join(f"{col} = ?, " for col in changes)
        conn.execute(
            f"UPDATE teams SET {assignments}updated_at = ? WHERE id = ?",
            (*changes.values(), iso(utcnow()), team_id),
        )
        if members is not None:
            _replace_members(conn, team_id, members)
        conn.commit()
    return _view(team_id)


def toggle_team_status(current: User, team_id: str) -> TeamView:
    row = _load_row(team_id)
    _require_manager(current, row, "toggle status of")
    with get_conn() as conn:
        conn.execute(
            "UPDATE teams SET is_active = 1 - is_active, updated_at = ? WHERE id = ?",
            (iso(utcnow()), team_id),
        )
        conn.commit()
    return _view(team_id)


def delete_team(current: User, team_id: str) -> None:
    row = _load_row(team_id)
    _require_manager(current, row, "delete")
    with get_conn() as conn:
        conn.execute("DELETE FROM teams WHERE id = ?", (team_id,))
        conn.commit()
    logger.info("Team %s deleted by %s", team_id, current.id)
