"""
auth/sqlite_db.py — SQLite schema bootstrap and shared connection helper.
"""
from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from typing import Generator

DB_PATH = os.getenv("DATABASE_PATH", "teamhub.db")

_CREATE_USERS = """
CREATE TABLE IF NOT EXISTS users (
    id             TEXT PRIMARY KEY,
    username       TEXT NOT NULL,
    surname        TEXT NOT NULL,
    email          TEXT UNIQUE NOT NULL COLLATE NOCASE,
    password_hash  TEXT NOT NULL,
    user_role      TEXT NOT NULL CHECK(user_role IN ('Coach','Parent','Player','Admin')),
    is_verified    INTEGER NOT NULL DEFAULT 0,
    is_active      INTEGER NOT NULL DEFAULT 1,
    country_code   TEXT NOT NULL,
    mobile_number  TEXT NOT NULL,
    avatar         TEXT,
    date_of_birth  TEXT NOT NULL,
    gender         TEXT NOT NULL CHECK(gender IN ('Male','Female','Other')),
    created_at     TEXT NOT NULL,
    updated_at     TEXT NOT NULL
);
"""

_CREATE_OTPS = """
CREATE TABLE IF NOT EXISTS otps (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    email            TEXT NOT NULL COLLATE NOCASE,
    otp              TEXT NOT NULL,
    purpose          TEXT NOT NULL DEFAULT 'verification'
                     CHECK(purpose IN ('verification','password_reset')),
    delivery_status  TEXT NOT NULL DEFAULT 'pending'
                     CHECK(delivery_status IN ('pending','sent')),
    created_at       TEXT NOT NULL
);
"""

_CREATE_BLACKLISTED_TOKENS = """
CREATE TABLE IF NOT EXISTS blacklisted_tokens (
    token       TEXT PRIMARY KEY,
    created_at  TEXT NOT NULL,
    expires_at  TEXT NOT NULL
);
"""

_CREATE_BLOGS = """
CREATE TABLE IF NOT EXISTS blogs (
    id           TEXT PRIMARY KEY,
    title        TEXT NOT NULL,
    content      TEXT NOT NULL,
    description  TEXT NOT NULL DEFAULT '',
    thumbnail    TEXT,
    author_id    TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    tags         TEXT NOT NULL DEFAULT '[]',
    status       TEXT NOT NULL DEFAULT 'draft' CHECK(status IN ('draft','published')),
    views        INTEGER NOT NULL DEFAULT 0,
    created_at   TEXT NOT NULL,
    updated_at   TEXT NOT NULL
);
"""

_CREATE_VIDEOS = """
CREATE TABLE IF NOT EXISTS videos (
    id           TEXT PRIMARY KEY,
    title        TEXT NOT NULL,
    description  TEXT NOT NULL DEFAULT '',
    video        TEXT NOT NULL,
    duration     REAL NOT NULL DEFAULT 0,
    author_id    TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    views        INTEGER NOT NULL DEFAULT 0,
    created_at   TEXT NOT NULL,
    updated_at   TEXT NOT NULL
);
"""

_CREATE_PRODUCTS = """
CREATE TABLE IF NOT EXISTS products (
    id           TEXT PRIMARY KEY,
    name         TEXT NOT NULL,
    description  TEXT NOT NULL DEFAULT '',
    price        REAL NOT NULL CHECK(price >= 0),
    owner_id     TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    created_at   TEXT NOT NULL,
    updated_at   TEXT NOT NULL
);
"""

_CREATE_TEAMS = """
CREATE TABLE IF NOT EXISTS teams (
    id          TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    about       TEXT,
    coach_id    TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    photo       TEXT,
    is_active   INTEGER NOT NULL DEFAULT 1,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""

_CREATE_TEAM_MEMBERS = """
CREATE TABLE IF NOT EXISTS team_members (
    team_id   TEXT NOT NULL REFERENCES teams(id) ON DELETE CASCADE,
    user_id   TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    position  INTEGER NOT NULL,
    PRIMARY KEY (team_id, user_id)
);
"""

_CREATE_LIKES = """
CREATE TABLE IF NOT EXISTS likes (
    target_type  TEXT NOT NULL CHECK(target_type IN ('blog','video')),
    target_id    TEXT NOT NULL,
    user_id      TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    created_at   TEXT NOT NULL,
    PRIMARY KEY (target_type, target_id, user_id)
);
"""

_CREATE_COMMENTS = """
CREATE TABLE IF NOT EXISTS comments (
    id           TEXT PRIMARY KEY,
    seq          INTEGER NOT NULL,
    target_type  TEXT NOT NULL CHECK(target_type IN ('blog','video')),
    target_id    TEXT NOT NULL,
    user_id      TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    content      TEXT NOT NULL,
    created_at   TEXT NOT NULL
);
"""

_TABLES = [
    _CREATE_USERS,
    _CREATE_OTPS,
    _CREATE_BLACKLISTED_TOKENS,
    _CREATE_BLOGS,
    _CREATE_VIDEOS,
    _CREATE_PRODUCTS,
    _CREATE_TEAMS,
    _CREATE_TEAM_MEMBERS,
    _CREATE_LIKES,
    _CREATE_COMMENTS,
]

_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_users_role ON users(user_role);",
    "CREATE INDEX IF NOT EXISTS idx_otps_email ON otps(email);",
    "CREATE INDEX IF NOT EXISTS idx_otps_created ON otps(created_at);",
    "CREATE INDEX IF NOT EXISTS idx_blacklist_expires ON blacklisted_tokens(expires_at);",
    "CREATE INDEX IF NOT EXISTS idx_blogs_author ON blogs(author_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_videos_author ON videos(author_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_products_owner ON products(owner_id);",
    "CREATE INDEX IF NOT EXISTS idx_teams_coach ON teams(coach_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_team_members_user ON team_members(user_id);",
    "CREATE INDEX IF NOT EXISTS idx_comments_target ON comments(target_type, target_id, seq);",
]


def init_db() -> None:
    """Create tables if they don't exist. Safe to call on every startup."""
    with get_conn() as conn:
        for ddl in _TABLES:
            conn.execute(ddl)
        for idx in _INDEXES:
            conn.execute(idx)
        conn.commit()


@contextmanager
def get_conn() -> Generator[sqlite3.Connection, None, None]:
    """Yield a connection with row_factory set and foreign keys enforced."""
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA foreign_keys=ON;")
    try:
        yield conn
    finally:
        conn.close()
