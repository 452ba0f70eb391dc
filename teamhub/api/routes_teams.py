"""
api/routes_teams.py — Team management for Admins and coaches.

Team forms are multipart (the photo is a file). `members` may be sent as
repeated fields, a JSON array string, or a comma-separated string.
"""
from __future__ import annotations

import json
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from ..auth.models import User
from ..config import Settings, get_settings
from ..core import teams
from ..core.errors import ValidationError
from ..core.uploads import stored_upload
from .dependencies import get_current_user
from .errors import paged, success_response

router = APIRouter()


def parse_member_ids(raw: Optional[list[str]]) -> Optional[list[str]]:
    """Flatten the accepted `members` encodings into a list of ids."""
    if raw is None:
        return None
    ids: list[str] = []
    for entry in raw:
        entry = (entry or "").strip()
        if not entry:
            continue
        if entry.startswith("["):
            try:
                decoded = json.loads(entry)
            except json.JSONDecodeError as exc:
                raise ValidationError("Invalid members format") from exc
            if not isinstance(decoded, list):
                raise ValidationError("Invalid members format")
            ids.extend(str(i) for i in decoded)
        else:
            ids.extend(part.strip() for part in entry.split(","))
    return [i for i in ids if i]


@router.get("/api/teams")
async def list_teams(
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    user: User = Depends(get_current_user),
):
    items, pagination = teams.list_teams(user, page, limit)
    return success_response("Teams fetched successfully", paged(items, pagination, "teams"))


@router.post("/api/teams/addteam")
async def add_team(
    name: Optional[str] = Form(default=None),
    coach: Optional[str] = Form(default=None),
    about: Optional[str] = Form(default=None),
    members: Optional[list[str]] = Form(default=None),
    photo: Optional[UploadFile] = File(default=None),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    member_ids = parse_member_ids(members) or []
    async with stored_upload(photo, "teamavatars", settings.uploads_dir) as photo_path:
        team = teams.create_team(
            user,
            name=name,
            coach_id=coach,
            about=about,
            member_ids=member_ids,
            photo=photo_path,
        )
    return success_response("Team created successfully", team, http_status=201)


@router.put("/api/teams/status/{team_id}")
async def toggle_status(team_id: str, user: User = Depends(get_current_user)):
    team = teams.toggle_team_status(user, team_id)
    state = "activated" if team.is_active else "deactivated"
    return success_response(f"Team {state} successfully", team)


@router.get("/api/teams/{team_id}")
async def get_team(team_id: str, user: User = Depends(get_current_user)):
    return success_response("Team fetched successfully", teams.get_team(user, team_id))


@router.put("/api/teams/{team_id}")
async def update_team(
    team_id: str,
    name: Optional[str] = Form(default=None),
    about: Optional[str] = Form(default=None),
    members: Optional[list[str]] = Form(default=None),
    photo: Optional[UploadFile] = File(default=None),
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_settings),
):
    async with stored_upload(photo, "teamavatars", settings.uploads_dir) as photo_path:
        team = teams.update_team(
            user,
            team_id,
            name=name,
            about=about,
            member_ids=parse_member_ids(members),
            photo=photo_path,
        )
    return success_response("Team updated successfully", team)


@router.delete("/api/teams/{team_id}")
async def delete_team(team_id: str, user: User = Depends(get_current_user)):
    teams.delete_team(user, team_id)
    return success_response("Team deleted successfully")
