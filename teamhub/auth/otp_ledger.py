"""
auth/otp_ledger.py — One-time codes keyed by email and purpose.

At most one live code exists per email: issuing deletes every earlier code
for that address in the same transaction.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ..config import OTP_PURPOSE_VERIFICATION, OTP_TTL_SECONDS
from .models import OTPRecord, iso, utcnow
from .sqlite_db import get_conn

DELIVERY_PENDING = "pending"
DELIVERY_SENT = "sent"


def issue_otp(email: str, code: str, purpose: str = OTP_PURPOSE_VERIFICATION) -> OTPRecord:
    """Replace any outstanding code for `email` with a new pending one."""
    email = email.strip().lower()
    with get_conn() as conn:
        conn.execute("DELETE FROM otps WHERE email = ?", (email,))
        cur = conn.execute(
            """
            INSERT INTO otps (email, otp, purpose, delivery_status, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (email, code, purpose, DELIVERY_PENDING, iso(utcnow())),
        )
        conn.commit()
        row = conn.execute("SELECT * FROM otps WHERE id = ?", (cur.lastrowid,)).fetchone()
    return OTPRecord.from_row(row)


def find_otp(email: str, code: str) -> Optional[OTPRecord]:
    with get_conn() as conn:
        row = conn.execute(
            "SELECT * FROM otps WHERE email = ? AND otp = ? ORDER BY id DESC LIMIT 1",
            (email.strip().lower(), code),
        ).fetchone()
    return OTPRecord.from_row(row) if row else None


def latest_otp(email: str) -> Optional[OTPRecord]:
    with get_conn() as conn:
        row = conn.execute(
            "SELECT * FROM otps WHERE email = ? ORDER BY id DESC LIMIT 1",
            (email.strip().lower(),),
        ).fetchone()
    return OTPRecord.from_row(row) if row else None


def consume_otp(record_id: int) -> bool:
    """Delete the record. Returns False if someone else consumed it first."""
    with get_conn() as conn:
        cur = conn.execute("DELETE FROM otps WHERE id = ?", (record_id,))
        conn.commit()
    return cur.rowcount == 1


def delete_otps_for(email: str) -> int:
    with get_conn() as conn:
        cur = conn.execute("DELETE FROM otps WHERE email = ?", (email.strip().lower(),))
        conn.commit()
    return cur.rowcount


def mark_delivered(email: str, code: str) -> bool:
    with get_conn() as conn:
        cur = conn.execute(
            "UPDATE otps SET delivery_status = ? WHERE email = ? AND otp = ?",
            (DELIVERY_SENT, email.strip().lower(), code),
        )
        conn.commit()
    return cur.rowcount > 0


def purge_expired_otps(now: Optional[datetime] = None) -> int:
    cutoff = (now or utcnow()) - timedelta(seconds=OTP_TTL_SECONDS)
    with get_conn() as conn:
        cur = conn.execute("DELETE FROM otps WHERE created_at < ?", (iso(cutoff),))
        conn.commit()
    return cur.rowcount
