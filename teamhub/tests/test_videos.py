"""
test_videos.py — Video CRUD, formatting helpers and engagement.
"""
from __future__ import annotations

from datetime import timedelta

import pytest

from teamhub.auth.models import Role, utcnow
from teamhub.core import videos
from teamhub.core.errors import ForbiddenError, NotFoundError, ValidationError


@pytest.fixture
def author(make_user):
    return make_user(role=Role.COACH)


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, "0 sec"), (45, "45 sec"), (60, "1 min"), (180, "3 min"), (185, "3:05 min")],
)
def test_format_duration(seconds, expected):
    assert videos.format_duration(seconds) == expected


@pytest.mark.parametrize(
    "delta, expected",
    [
        (timedelta(seconds=20), "Just now"),
        (timedelta(minutes=5), "5 Min"),
        (timedelta(hours=1), "1 Hour"),
        (timedelta(hours=5), "5 Hours"),
        (timedelta(days=3), "3 Days"),
        (timedelta(days=14), "2 Weeks"),
        (timedelta(days=62), "2 Months"),
        (timedelta(days=800), "2 Years"),
    ],
)
def test_time_ago(delta, expected):
    now = utcnow()
    assert videos.time_ago(now - delta, now) == expected


def test_create_video_requires_title_and_file(author):
    with pytest.raises(ValidationError, match="Title is required"):
        videos.create_video(author, title="", video_path="/uploads/videos/a.mp4")
    with pytest.raises(ValidationError, match="Video file is required"):
        videos.create_video(author, title="Drill", video_path=None)


@pytest.mark.parametrize("duration", [-1, float("inf"), float("nan")])
def test_duration_must_be_finite_and_non_negative(author, duration):
    with pytest.raises(ValidationError, match="Duration must be non-negative"):
        videos.create_video(author, title="Drill", video_path="/uploads/videos/a.mp4", duration=duration)

    video = videos.create_video(author, title="Drill", video_path="/uploads/videos/a.mp4", duration=30)
    with pytest.raises(ValidationError, match="Duration must be non-negative"):
        videos.update_video(author, video.id, {"duration": duration})
    assert videos.get_video(video.id).duration == 30


def test_rejected_video_update_leaves_no_file_on_disk(client, author, headers_for, settings):
    video = videos.create_video(author, title="Drill", video_path="/uploads/videos/a.mp4")
    resp = client.put(
        f"/api/videos/{video.id}",
        headers=headers_for(author),
        data={"duration": "-5"},
        files={"video": ("drill.mp4", b"mp4-bytes", "video/mp4")},
    )
    assert resp.status_code == 400
    assert list((settings.uploads_dir / "videos").glob("*")) == []


def test_video_lifecycle(author, make_user):
    video = videos.create_video(
        author, title="Drill", video_path="/uploads/videos/a.mp4", duration=95
    )
    assert video.formatted_duration == "1:35 min"
    assert video.time == "Just now"

    assert videos.get_video(video.id).views == 1

    fan = make_user()
    assert videos.toggle_video_like(fan, video.id).likes_count == 1
    videos.comment_on_video(fan, video.id, "Great drill")
    assert [c.content for c in videos.get_video(video.id).comments] == ["Great drill"]

    with pytest.raises(ForbiddenError):
        videos.update_video(fan, video.id, {"title": "Mine now"})
    assert videos.update_video(author, video.id, {"title": "Drill v2"}).title == "Drill v2"

    items, pagination = videos.list_videos()
    assert pagination.total_records == 1
    assert items[0].likes == [fan.id]

    videos.delete_video(author, video.id)
    with pytest.raises(NotFoundError, match="Video not found"):
        videos.get_video(video.id)


def test_video_upload_endpoint(client, author, headers_for, settings):
    resp = client.post(
        "/api/videos",
        headers=headers_for(author),
        data={"title": "Drill", "duration": "42"},
        files={"video": ("drill.mp4", b"mp4-bytes", "video/mp4")},
    )
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["video"].startswith("/uploads/videos/")
    assert data["formattedDuration"] == "42 sec"
    assert (settings.uploads_dir / "videos" / data["video"].rsplit("/", 1)[1]).exists()

    assert client.get(f"/api/videos/{data['id']}").json()["data"]["views"] == 1


def test_video_upload_rejects_images(client, author, headers_for):
    resp = client.post(
        "/api/videos",
        headers=headers_for(author),
        data={"title": "Drill"},
        files={"video": ("pic.png", b"png", "image/png")},
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Only video files are allowed!"


def test_video_upload_without_file_is_400(client, author, headers_for):
    resp = client.post("/api/videos", headers=headers_for(author), data={"title": "Drill"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Video file is required"
