"""
test_teams.py — Team policy, member validation and the team endpoints.
"""
from __future__ import annotations

import json

import pytest

from teamhub.api.routes_teams import parse_member_ids
from teamhub.auth import users
from teamhub.auth.models import Role
from teamhub.core import teams
from teamhub.core.errors import ForbiddenError, NotFoundError, ValidationError


@pytest.fixture
def coach(make_user):
    return make_user(role=Role.COACH)


@pytest.fixture
def admin(make_user):
    return make_user(role=Role.ADMIN)


@pytest.fixture
def players(make_user):
    return [make_user(role=Role.PLAYER) for _ in range(3)]


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

def test_coach_creates_own_team(coach, players):
    team = teams.create_team(
        coach, name="Falcons", coach_id=coach.id, member_ids=[p.id for p in players]
    )
    assert team.coach.id == coach.id
    assert [m.id for m in team.members] == [p.id for p in players]
    assert team.is_active is True


def test_duplicate_member_ids_are_collapsed(coach, players):
    ids = [players[0].id, players[0].id, players[1].id]
    team = teams.create_team(coach, name="Falcons", coach_id=coach.id, member_ids=ids)
    assert [m.id for m in team.members] == [players[0].id, players[1].id]


def test_coach_cannot_create_team_for_other_coach(coach, make_user):
    other = make_user(role=Role.COACH)
    with pytest.raises(ForbiddenError, match="themself"):
        teams.create_team(coach, name="Falcons", coach_id=other.id)


def test_admin_creates_team_for_any_coach(admin, coach):
    team = teams.create_team(admin, name="Falcons", coach_id=coach.id)
    assert team.coach.id == coach.id


def test_create_requires_name_and_coach(admin):
    with pytest.raises(ValidationError, match="Team name and coach are required"):
        teams.create_team(admin, name="", coach_id=None)


def test_named_coach_must_exist_and_be_a_coach(admin, players):
    with pytest.raises(NotFoundError, match="Coach not found"):
        teams.create_team(admin, name="Falcons", coach_id="missing")
    with pytest.raises(ValidationError, match="not a Coach"):
        teams.create_team(admin, name="Falcons", coach_id=players[0].id)


def test_non_player_members_are_rejected_with_details(coach, make_user, players):
    parent = make_user(role=Role.PARENT)
    with pytest.raises(ValidationError) as excinfo:
        teams.create_team(
            coach, name="Falcons", coach_id=coach.id, member_ids=[players[0].id, parent.id]
        )
    assert excinfo.value.details == {
        "invalidCount": 1,
        "invalidMembers": [{"id": parent.id, "role": "Parent"}],
    }


def test_unknown_member_ids_are_rejected(coach):
    with pytest.raises(ValidationError, match="Some member IDs are invalid") as excinfo:
        teams.create_team(coach, name="Falcons", coach_id=coach.id, member_ids=["ghost"])
    assert excinfo.value.details["invalidCount"] == 1


def test_mixed_unknown_and_non_player_members_are_reported_together(coach, make_user, players):
    parent = make_user(role=Role.PARENT)
    with pytest.raises(ValidationError, match="Some member IDs are invalid") as excinfo:
        teams.create_team(
            coach,
            name="Falcons",
            coach_id=coach.id,
            member_ids=[players[0].id, "ghost", parent.id],
        )
    assert excinfo.value.details == {
        "invalidCount": 2,
        "invalidMembers": [
            {"id": "ghost", "role": None},
            {"id": parent.id, "role": "Parent"},
        ],
    }


def test_list_teams_scoped_by_role(admin, coach, make_user, players):
    other = make_user(role=Role.COACH)
    teams.create_team(coach, name="Mine", coach_id=coach.id)
    teams.create_team(other, name="Theirs", coach_id=other.id)

    all_teams, pagination = teams.list_teams(admin)
    assert {t.name for t in all_teams} == {"Mine", "Theirs"}
    assert pagination.total_records == 2

    own, _ = teams.list_teams(coach)
    assert [t.name for t in own] == ["Mine"]

    none, pagination = teams.list_teams(players[0])
    assert none == []
    assert pagination.total_records == 0


def test_get_team_visible_to_members_only(coach, players, make_user):
    team = teams.create_team(coach, name="Falcons", coach_id=coach.id, member_ids=[players[0].id])
    assert teams.get_team(players[0], team.id).id == team.id
    with pytest.raises(ForbiddenError):
        teams.get_team(players[1], team.id)


def test_update_and_toggle_require_manager(coach, make_user, players):
    team = teams.create_team(coach, name="Falcons", coach_id=coach.id)
    other = make_user(role=Role.COACH)

    with pytest.raises(ForbiddenError, match="Only Admin or the team's coach"):
        teams.update_team(other, team.id, name="Stolen")

    updated = teams.update_team(coach, team.id, name="Hawks", member_ids=[players[1].id])
    assert updated.name == "Hawks"
    assert [m.id for m in updated.members] == [players[1].id]

    assert teams.toggle_team_status(coach, team.id).is_active is False
    assert teams.toggle_team_status(coach, team.id).is_active is True


def test_delete_team(admin, coach):
    team = teams.create_team(coach, name="Falcons", coach_id=coach.id)
    teams.delete_team(admin, team.id)
    with pytest.raises(NotFoundError):
        teams.get_team(admin, team.id)


def test_deleting_member_account_drops_membership(coach, players):
    team = teams.create_team(coach, name="Falcons", coach_id=coach.id, member_ids=[p.id for p in players])
    users.delete_user(players[0].id)
    assert [m.id for m in teams.get_team(coach, team.id).members] == [p.id for p in players[1:]]


# ---------------------------------------------------------------------------
# Member encodings
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        ([json.dumps(["a", "b"])], ["a", "b"]),
        (["a, b ,c"], ["a", "b", "c"]),
        (["a", "b"], ["a", "b"]),
        ([""], []),
    ],
)
def test_parse_member_ids(raw, expected):
    assert parse_member_ids(raw) == expected


def test_parse_member_ids_rejects_bad_json():
    with pytest.raises(ValidationError):
        parse_member_ids(["[not json"])


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

def test_add_team_endpoint(client, coach, players, headers_for):
    resp = client.post(
        "/api/teams/addteam",
        headers=headers_for(coach),
        data={"name": "Falcons", "coach": coach.id, "members": json.dumps([p.id for p in players])},
        files={"photo": ("team.jpg", b"jpeg-bytes", "image/jpeg")},
    )
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["name"] == "Falcons"
    assert len(data["members"]) == 3
    assert data["photo"].startswith("/uploads/teamavatars/")
    assert data["isActive"] is True


def test_add_team_with_parent_member_returns_details(client, coach, make_user, headers_for):
    parent = make_user(role=Role.PARENT)
    resp = client.post(
        "/api/teams/addteam",
        headers=headers_for(coach),
        data={"name": "Falcons", "coach": coach.id, "members": parent.id},
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Only users with role 'Player' can be added as team members"
    assert body["error"]["invalidMembers"] == [{"id": parent.id, "role": "Parent"}]


def test_rejected_team_leaves_no_photo_on_disk(client, coach, headers_for, settings):
    resp = client.post(
        "/api/teams/addteam",
        headers=headers_for(coach),
        data={"coach": coach.id},
        files={"photo": ("team.jpg", b"jpeg-bytes", "image/jpeg")},
    )
    assert resp.status_code == 400
    assert list((settings.uploads_dir / "teamavatars").glob("*")) == []


def test_team_status_endpoint(client, coach, headers_for):
    team = teams.create_team(coach, name="Falcons", coach_id=coach.id)
    resp = client.put(f"/api/teams/status/{team.id}", headers=headers_for(coach))
    assert resp.status_code == 200
    assert resp.json()["data"]["isActive"] is False


def test_list_teams_endpoint_paginates(client, admin, coach, headers_for):
    for i in range(3):
        teams.create_team(coach, name=f"T{i}", coach_id=coach.id)
    resp = client.get("/api/teams?page=2&limit=2", headers=headers_for(admin))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert len(data["teams"]) == 1
    assert data["pagination"] == {
        "currentPage": 2,
        "perPage": 2,
        "totalRecords": 3,
        "totalPages": 2,
        "hasNext": False,
        "hasPrev": True,
    }


def test_teams_require_auth(client):
    assert client.get("/api/teams").status_code == 401
