"""
core/videos.py — Video CRUD, views, likes and comments.
"""
from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime
from typing import Any, Optional

from ..auth import users
from ..auth.models import User, iso, parse_ts, utcnow
from ..auth.sqlite_db import get_conn
from . import engagement
from .errors import NotFoundError, ValidationError
from .models import CommentView, LikeResult, Pagination, UserSummary, VideoView, clamp_page
from .policy import require_owner

logger = logging.getLogger(__name__)


def _check_duration(duration: Any) -> float:
    if (
        isinstance(duration, bool)
        or not isinstance(duration, (int, float))
        or not math.isfinite(duration)
        or duration < 0
    ):
        raise ValidationError("Duration must be non-negative")
    return float(duration)


def format_duration(seconds: float) -> str:
    """45 -> '45 sec', 180 -> '3 min', 185 -> '3:05 min'."""
    seconds = max(float(seconds or 0), 0.0)
    if seconds < 60:
        return f"{round(seconds)} sec"
    minutes = int(seconds // 60)
    remainder = round(seconds % 60)
    if remainder == 60:
        minutes, remainder = minutes + 1, 0
    if remainder == 0:
        return f"{minutes} min"
    return f"{minutes}:{remainder:02d} min"


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}{'s' if n > 1 else ''}"


def time_ago(created_at: datetime, now: Optional[datetime] = None) -> str:
    delta = (now or utcnow()) - created_at
    minutes = int(delta.total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} Min"
    if hours < 24:
        return _plural(hours, "Hour")
    if days < 7:
        return _plural(days, "Day")
    if days // 7 < 4:
        return _plural(days // 7, "Week")
    if days // 30 < 12:
        return _plural(max(days // 30, 1), "Month")
    return _plural(days // 365, "Year")


def _load_row(video_id: str):
    with get_conn() as conn:
        row = conn.execute("SELECT * FROM videos WHERE id = ?", (video_id,)).fetchone()
    if not row:
        raise NotFoundError("Video not found")
    return row


def _to_view(row, authors: dict[str, User], likes: list[str], comments: Optional[list[CommentView]] = None) -> VideoView:
    author = authors.get(row["author_id"])
    created_at = parse_ts(row["created_at"])
    return VideoView(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        video=row["video"],
        duration=row["duration"],
        formatted_duration=format_duration(row["duration"]),
        time=time_ago(created_at),
        author=UserSummary.of(author) if author else None,
        views=row["views"],
        likes=likes,
        likes_count=len(likes),
        comments=comments or [],
        created_at=created_at,
        updated_at=parse_ts(row["updated_at"]),
    )


def _full_view(video_id: str) -> VideoView:
    row = _load_row(video_id)
    authors = users.get_users_by_ids([row["author_id"]])
    likes = engagement.likes_for(engagement.VIDEO, [video_id]).get(video_id, [])
    return _to_view(row, authors, likes, engagement.comments_for(engagement.VIDEO, video_id))


def create_video(
    author: User,
    *,
    title: str,
    video_path: Optional[str],
    description: Optional[str] = None,
    duration: Optional[float] = None,
) -> VideoView:
    if not (title or "").strip():
        raise ValidationError("Title is required")
    if not video_path:
        raise ValidationError("Video file is required")
    if duration is not None:
        duration = _check_duration(duration)

    video_id = str(uuid.uuid4())
    now = iso(utcnow())
    with get_conn() as conn:
        conn.execute(
            """
            INSERT INTO videos
              (id, title, description, video, duration, author_id, views, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, 0, ?, ?)
            """,
            (video_id, title.strip(), description or "", video_path, duration or 0, author.id, now, now),
        )
        conn.commit()
    logger.info("Video %s created by %s", video_id, author.id)
    return _full_view(video_id)


def list_videos(page: Optional[int] = None, limit: Optional[int] = None) -> tuple[list[VideoView], Pagination]:
    page, limit, offset = clamp_page(page, limit)
    with get_conn() as conn:
        total = conn.execute("SELECT COUNT(*) FROM videos").fetchone()[0]
        rows = conn.execute(
            "SELECT * FROM videos ORDER BY created_at DESC LIMIT ? OFFSET ?", (limit, offset)
        ).fetchall()
    authors = users.get_users_by_ids(r["author_id"] for r in rows)
    likes = engagement.likes_for(engagement.VIDEO, [r["id"] for r in rows])
    views = [_to_view(r, authors, likes.get(r["id"], [])) for r in rows]
    return views, Pagination.build(page, limit, total)


def get_video(video_id: str) -> VideoView:
    with get_conn() as conn:
        cur = conn.execute("UPDATE videos SET views = views + 1 WHERE id = ?", (video_id,))
        conn.commit()
    if cur.rowcount == 0:
        raise NotFoundError("Video not found")
    return _full_view(video_id)


def update_video(user: User, video_id: str, fields: dict[str, Any]) -> VideoView:
    row = _load_row(video_id)
    require_owner(row["author_id"], user, "video", "update")

    changes = {
        key: fields[key]
        for key in ("title", "description", "video", "duration")
        if fields.get(key) is not None
    }
    if "title" in changes and not str(changes["title"]).strip():
        raise ValidationError("Title cannot be empty")
    if "duration" in changes:
        changes["duration"] = _check_duration(changes["duration"])
    if changes:
        assignments = ", ".join(f"{col} = ?" for col in changes)
        with get_conn() as conn:
            conn.execute(
                f"UPDATE videos SET {assignments}, updated_at = ? WHERE id = ?",
                (*changes.values(), iso(utcnow()), video_id),
            )
            conn.commit()
    return _full_view(video_id)


def delete_video(user: User, video_id: str) -> None:
    row = _load_row(video_id)
    require_owner(row["author_id"], user, "video", "delete")
    with get_conn() as conn:
        engagement.clear_target(conn, engagement.VIDEO, video_id)
        conn.execute("DELETE FROM videos WHERE id = ?", (video_id,))
        conn.commit()
    logger.info("Video %s deleted by %s", video_id, user.id)


def toggle_video_like(user: User, video_id: str) -> LikeResult:
    _load_row(video_id)
    return engagement.toggle_like(engagement.VIDEO, video_id, user.id)


def comment_on_video(user: User, video_id: str, content: str) -> CommentView:
    _load_row(video_id)
    return engagement.add_comment(engagement.VIDEO, video_id, user, content)
