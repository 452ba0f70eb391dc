"""
core/engagement.py — Likes and comments shared by blogs and videos.

Both live in their own tables keyed by (target_type, target_id); a like is
unique per user and target, comments are append-only and ordered by `seq`.
"""
from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Iterable

from ..auth import users
from ..auth.models import User, iso, parse_ts, utcnow
from ..auth.sqlite_db import get_conn
from .errors import ValidationError
from .models import CommentView, LikeResult, UserSummary

BLOG = "blog"
VIDEO = "video"


def toggle_like(target_type: str, target_id: str, user_id: str) -> LikeResult:
    with get_conn() as conn:
        cur = conn.execute(
            "DELETE FROM likes WHERE target_type = ? AND target_id = ? AND user_id = ?",
            (target_type, target_id, user_id),
        )
        liked = cur.rowcount == 0
        if liked:
            conn.execute(
                "INSERT OR IGNORE INTO likes (target_type, target_id, user_id, created_at) VALUES (?, ?, ?, ?)",
                (target_type, target_id, user_id, iso(utcnow())),
            )
        conn.commit()
        count = conn.execute(
            "SELECT COUNT(*) FROM likes WHERE target_type = ? AND target_id = ?",
            (target_type, target_id),
        ).fetchone()[0]
    return LikeResult(liked=liked, likes_count=count)


def likes_for(target_type: str, target_ids: Iterable[str]) -> dict[str, list[str]]:
    ids = list(target_ids)
    result: dict[str, list[str]] = defaultdict(list)
    if not ids:
        return result
    placeholders = ",".join("?" for _ in ids)
    with get_conn() as conn:
        rows = conn.execute(
            f"""
            SELECT target_id, user_id FROM likes
            WHERE target_type = ? AND target_id IN ({placeholders})
            ORDER BY created_at
            """,
            (target_type, *ids),
        ).fetchall()
    for row in rows:
        result[row["target_id"]].append(row["user_id"])
    return result


def add_comment(target_type: str, target_id: str, author: User, content: str) -> CommentView:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Comment content is required")

    comment_id = str(uuid.uuid4())
    now = utcnow()
    with get_conn() as conn:
        conn.execute(
            """
            INSERT INTO comments (id, seq, target_type, target_id, user_id, content, created_at)
            VALUES (
                ?,
                (SELECT COALESCE(MAX(seq), 0) + 1 FROM comments WHERE target_type = ? AND target_id = ?),
                ?, ?, ?, ?, ?
            )
            """,
            (comment_id, target_type, target_id, target_type, target_id, author.id, content, iso(now)),
        )
        conn.commit()
    return CommentView(id=comment_id, user=UserSummary.of(author), content=content, created_at=now)


def comments_for(target_type: str, target_id: str) -> list[CommentView]:
    with get_conn() as conn:
        rows = conn.execute(
            "SELECT * FROM comments WHERE target_type = ? AND target_id = ? ORDER BY seq",
            (target_type, target_id),
        ).fetchall()
    authors = users.get_users_by_ids(r["user_id"] for r in rows)
    return [
        CommentView(
            id=r["id"],
            user=UserSummary.of(authors[r["user_id"]]) if r["user_id"] in authors else None,
            content=r["content"],
            created_at=parse_ts(r["created_at"]),
        )
        for r in rows
    ]


def clear_target(conn, target_type: str, target_id: str) -> None:
    """Drop likes and comments of a deleted blog/video inside the caller's transaction."""
    conn.execute("DELETE FROM likes WHERE target_type = ? AND target_id = ?", (target_type, target_id))
    conn.execute("DELETE FROM comments WHERE target_type = ? AND target_id = ?", (target_type, target_id))
