"""
auth/users.py — Credential store: user rows and password hashes.
"""
from __future__ import annotations

import uuid
from typing import Iterable, Optional

from .models import Role, User, iso, utcnow
from .sqlite_db import get_conn

# Columns a profile update may touch.
PROFILE_COLUMNS = ("username", "surname", "country_code", "mobile_number", "avatar", "date_of_birth", "gender")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_id(user_id: str) -> Optional[User]:
    with get_conn() as conn:
        row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
    return User.from_row(row) if row else None


def get_user_by_email(email: str) -> Optional[User]:
    with get_conn() as conn:
        row = conn.execute(
            "SELECT * FROM users WHERE email = ?", (normalize_email(email),)
        ).fetchone()
    return User.from_row(row) if row else None


def get_users_by_ids(user_ids: Iterable[str]) -> dict[str, User]:
    ids = list(dict.fromkeys(user_ids))
    if not ids:
        return {}
    placeholders = ",".join("?" for _ in ids)
    with get_conn() as conn:
        rows = conn.execute(
            f"SELECT * FROM users WHERE id IN ({placeholders})", ids
        ).fetchall()
    return {row["id"]: User.from_row(row) for row in rows}


def create_user(
    *,
    username: str,
    surname: str,
    email: str,
    password_hash: str,
    user_role: Role,
    country_code: str,
    mobile_number: str,
    date_of_birth: str,
    gender: str,
    avatar: Optional[str] = None,
    is_verified: bool = False,
) -> User:
    user_id = str(uuid.uuid4())
    now = iso(utcnow())
    with get_conn() as conn:
        conn.execute(
            """
            INSERT INTO users
              (id, username, surname, email, password_hash, user_role,
               is_verified, is_active, country_code, mobile_number, avatar,
               date_of_birth, gender, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, 1, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user_id, username.strip(), surname.strip(), normalize_email(email),
                password_hash, Role.parse(user_role).value, int(is_verified),
                country_code.strip(), mobile_number.strip(), avatar,
                date_of_birth, gender, now, now,
            ),
        )
        conn.commit()
    return get_user_by_id(user_id)  # type: ignore[return-value]


def delete_user(user_id: str) -> bool:
    with get_conn() as conn:
        cur = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        conn.commit()
    return cur.rowcount > 0


def mark_verified(user_id: str) -> None:
    with get_conn() as conn:
        conn.execute(
            "UPDATE users SET is_verified = 1, updated_at = ? WHERE id = ?",
            (iso(utcnow()), user_id),
        )
        conn.commit()


def update_password(user_id: str, password_hash: str) -> None:
    with get_conn() as conn:
        conn.execute(
            "UPDATE users SET password_hash = ?, updated_at = ? WHERE id = ?",
            (password_hash, iso(utcnow()), user_id),
        )
        conn.commit()


def update_profile(user_id: str, fields: dict) -> User:
    changes = {k: v for k, v in fields.items() if k in PROFILE_COLUMNS}
    if changes:
        assignments = ", ".join(f"{col} = ?" for col in changes)
        with get_conn() as conn:
            conn.execute(
                f"UPDATE users SET {assignments}, updated_at = ? WHERE id = ?",
                (*changes.values(), iso(utcnow()), user_id),
            )
            conn.commit()
    return get_user_by_id(user_id)  # type: ignore[return-value]


def list_users_by_role(
    role: Role,
    *,
    is_active: Optional[bool] = None,
    offset: int = 0,
    limit: int = 10,
) -> tuple[list[User], int]:
    where = ["user_role = ?"]
    params: list = [role.value]
    if is_active is not None:
        where.append("is_active = ?")
        params.append(int(is_active))
    clause = " AND ".join(where)
    with get_conn() as conn:
        total = conn.execute(f"SELECT COUNT(*) FROM users WHERE {clause}", params).fetchone()[0]
        rows = conn.execute(
            f"SELECT * FROM users WHERE {clause} ORDER BY created_at DESC LIMIT ? OFFSET ?",
            (*params, limit, offset),
        ).fetchall()
    return [User.from_row(r) for r in rows], total
