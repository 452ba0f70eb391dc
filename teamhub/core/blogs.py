"""
core/blogs.py — Blog CRUD, views, likes and comments.
"""
from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Optional, Union

from ..auth import users
from ..auth.models import User, iso, parse_ts, utcnow
from ..auth.sqlite_db import get_conn
from . import engagement
from .errors import NotFoundError, ValidationError
from .models import BlogView, CommentView, LikeResult, Pagination, UserSummary, clamp_page
from .policy import require_owner

logger = logging.getLogger(__name__)

BLOG_STATUSES = ("draft", "published")


def parse_tags(tags: Union[str, list, None]) -> list[str]:
    """Accept a list or a comma-separated string; drop blanks."""
    if tags is None:
        return []
    if isinstance(tags, str):
        items = tags.split(",")
    else:
        items = list(tags)
    return [str(t).strip() for t in items if str(t).strip()]


def _check_status(status: Optional[str]) -> str:
    status = status or "draft"
    if status not in BLOG_STATUSES:
        raise ValidationError(f"Invalid status '{status}'. Must be one of: {', '.join(BLOG_STATUSES)}")
    return status


def _load_row(blog_id: str):
    with get_conn() as conn:
        row = conn.execute("SELECT * FROM blogs WHERE id = ?", (blog_id,)).fetchone()
    if not row:
        raise NotFoundError("Blog not found")
    return row


def _to_view(row, authors: dict[str, User], likes: list[str], comments: Optional[list[CommentView]] = None) -> BlogView:
    author = authors.get(row["author_id"])
    return BlogView(
        id=row["id"],
        title=row["title"],
        content=row["content"],
        description=row["description"],
        thumbnail=row["thumbnail"],
        author=UserSummary.of(author) if author else None,
        tags=json.loads(row["tags"] or "[]"),
        status=row["status"],
        views=row["views"],
        likes=likes,
        likes_count=len(likes),
        comments=comments or [],
        created_at=parse_ts(row["created_at"]),
        updated_at=parse_ts(row["updated_at"]),
    )


def _views_for(rows) -> list[BlogView]:
    authors = users.get_users_by_ids(r["author_id"] for r in rows)
    likes = engagement.likes_for(engagement.BLOG, [r["id"] for r in rows])
    return [_to_view(r, authors, likes.get(r["id"], [])) for r in rows]


def _full_view(blog_id: str) -> BlogView:
    row = _load_row(blog_id)
    authors = users.get_users_by_ids([row["author_id"]])
    likes = engagement.likes_for(engagement.BLOG, [blog_id]).get(blog_id, [])
    comments = engagement.comments_for(engagement.BLOG, blog_id)
    return _to_view(row, authors, likes, comments)


def create_blog(
    author: User,
    *,
    title: str,
    content: str,
    description: Optional[str] = None,
    tags: Union[str, list, None] = None,
    status: Optional[str] = None,
    thumbnail: Optional[str] = None,
) -> BlogView:
    if not (title or "").strip() or not (content or "").strip():
        raise ValidationError("Title and content are required")

    blog_id = str(uuid.uuid4())
    now = iso(utcnow())
    with get_conn() as conn:
        conn.execute(
            """
            INSERT INTO blogs
              (id, title, content, description, thumbnail, author_id, tags, status, views, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, 0, ?, ?)
            """,
            (
                blog_id, title.strip(), content, description or "", thumbnail,
                author.id, json.dumps(parse_tags(tags)), _check_status(status), now, now,
            ),
        )
        conn.commit()
    logger.info("Blog %s created by %s", blog_id, author.id)
    return _full_view(blog_id)


def list_blogs(page: Optional[int] = None, limit: Optional[int] = None) -> tuple[list[BlogView], Pagination]:
    page, limit, offset = clamp_page(page, limit)
    with get_conn() as conn:
        total = conn.execute("SELECT COUNT(*) FROM blogs").fetchone()[0]
        rows = conn.execute(
            "SELECT * FROM blogs ORDER BY created_at DESC LIMIT ? OFFSET ?", (limit, offset)
        ).fetchall()
    return _views_for(rows), Pagination.build(page, limit, total)


def list_user_blogs(
    user: User,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    status: Optional[str] = None,
) -> tuple[list[BlogView], Pagination]:
    page, limit, offset = clamp_page(page, limit)
    where, params = "author_id = ?", [user.id]
    if status:
        where += " AND status = ?"
        params.append(_check_status(status))
    with get_conn() as conn:
        total = conn.execute(f"SELECT COUNT(*) FROM blogs WHERE {where}", params).fetchone()[0]
        rows = conn.execute(
            f"SELECT * FROM blogs WHERE {where} ORDER BY created_at DESC LIMIT ? OFFSET ?",
            (*params, limit, offset),
        ).fetchall()
    return _views_for(rows), Pagination.build(page, limit, total)


def get_blog(blog_id: str) -> BlogView:
    """Fetch one blog and count the view."""
    with get_conn() as conn:
        cur = conn.execute("UPDATE blogs SET views = views + 1 WHERE id = ?", (blog_id,))
        conn.commit()
    if cur.rowcount == 0:
        raise NotFoundError("Blog not found")
    return _full_view(blog_id)


def update_blog(user: User, blog_id: str, fields: dict[str, Any]) -> BlogView:
    row = _load_row(blog_id)
    require_owner(row["author_id"], user, "blog", "update")

    changes: dict[str, Any] = {}
    for key in ("title", "content", "description", "thumbnail"):
        if fields.get(key) is not None:
            changes[key] = fields[key]
    if fields.get("tags") is not None:
        changes["tags"] = json.dumps(parse_tags(fields["tags"]))
    if fields.get("status") is not None:
        changes["status"] = _check_status(fields["status"])
    if "title" in changes and not str(changes["title"]).strip():
        raise ValidationError("Title cannot be empty")

    if changes:
        assignments = ", ".join(f"{col} = ?" for col in changes)
        with get_conn() as conn:
            conn.execute(
                f"UPDATE blogs SET {assignments}, updated_at = ? WHERE id = ?",
                (*changes.values(), iso(utcnow()), blog_id),
            )
            conn.commit()
    return _full_view(blog_id)


def delete_blog(user: User, blog_id: str) -> None:
    row = _load_row(blog_id)
    require_owner(row["author_id"], user, "blog", "delete")
    with get_conn() as conn:
        engagement.clear_target(conn, engagement.BLOG, blog_id)
        conn.execute("DELETE FROM blogs WHERE id = ?", (blog_id,))
        conn.commit()
    logger.info("Blog %s deleted by %s", blog_id, user.id)


def toggle_blog_like(user: User, blog_id: str) -> LikeResult:
    _load_row(blog_id)
    return engagement.toggle_like(engagement.BLOG, blog_id, user.id)


def comment_on_blog(user: User, blog_id: str, content: str) -> CommentView:
    _load_row(blog_id)
    return engagement.add_comment(engagement.BLOG, blog_id, user, content)
