"""
auth/blacklist.py — Revoked session tokens.

Rows live exactly as long as the token they revoke could still verify.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ..config import SESSION_TTL_SECONDS
from .models import iso, utcnow
from .sqlite_db import get_conn


def blacklist_token(token: str) -> None:
    now = utcnow()
    expires_at = now + timedelta(seconds=SESSION_TTL_SECONDS)
    with get_conn() as conn:
        conn.execute(
            "INSERT OR IGNORE INTO blacklisted_tokens (token, created_at, expires_at) VALUES (?, ?, ?)",
            (token, iso(now), iso(expires_at)),
        )
        conn.commit()


def is_blacklisted(token: str) -> bool:
    with get_conn() as conn:
        row = conn.execute(
            "SELECT 1 FROM blacklisted_tokens WHERE token = ?", (token,)
        ).fetchone()
    return row is not None


def purge_expired_tokens(now: Optional[datetime] = None) -> int:
    with get_conn() as conn:
        cur = conn.execute(
            "DELETE FROM blacklisted_tokens WHERE expires_at < ?",
            (iso(now or utcnow()),),
        )
        conn.commit()
    return cur.rowcount
