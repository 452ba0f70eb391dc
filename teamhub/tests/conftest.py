"""
conftest.py — Shared fixtures for all teamhub tests.
"""
from __future__ import annotations

import functools
import itertools
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from teamhub.auth import sqlite_db, users
from teamhub.auth.models import Role, User
from teamhub.auth.token_utils import SessionSigner, hash_password
from teamhub.config import Settings

PASSWORD = "secret123"

_counter = itertools.count(1)


@functools.lru_cache(maxsize=1)
def _password_hash() -> str:
    return hash_password(PASSWORD)


# ---------------------------------------------------------------------------
# Database & settings
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def db(tmp_path, monkeypatch):
    """Point every test at its own fresh SQLite file."""
    monkeypatch.setattr(sqlite_db, "DB_PATH", str(tmp_path / "test.db"))
    sqlite_db.init_db()
    yield


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(token_secret="test-secret", uploads_dir=tmp_path / "uploads")


# ---------------------------------------------------------------------------
# Mail
# ---------------------------------------------------------------------------

class FakeDispatcher:
    """Records every OTP it is asked to deliver."""

    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.fail = False

    def dispatch(self, email: str, code: str, purpose: str) -> None:
        if self.fail:
            from teamhub.core.errors import MailDeliveryError
            raise MailDeliveryError()
        self.sent.append((email, code, purpose))

    def last_code(self, email: str) -> str:
        for sent_to, code, _ in reversed(self.sent):
            if sent_to == email:
                return code
        raise AssertionError(f"no OTP sent to {email}")


@pytest.fixture
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()


@pytest.fixture
def auth_service(settings, dispatcher):
    from teamhub.core.auth_service import AuthService
    return AuthService(settings, dispatcher)


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

@pytest.fixture
def app(settings, auth_service):
    from teamhub.api.app import create_app
    from teamhub.api.dependencies import get_auth_service
    from teamhub.config import get_settings

    application = create_app(settings)
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_auth_service] = lambda: auth_service
    return application


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)


# ---------------------------------------------------------------------------
# Users & tokens
# ---------------------------------------------------------------------------

@pytest.fixture
def make_user() -> Callable[..., User]:
    """Create a verified user of the given role directly in the database."""
    def _make(role: Role = Role.PLAYER, email: str | None = None, **overrides) -> User:
        n = next(_counter)
        fields = dict(
            username=f"User{n}",
            surname="Test",
            email=email or f"user{n}@example.com",
            password_hash=_password_hash(),
            user_role=role,
            country_code="+1",
            mobile_number="5551234567",
            date_of_birth="2000-01-01",
            gender="Other",
            is_verified=True,
        )
        fields.update(overrides)
        return users.create_user(**fields)
    return _make


@pytest.fixture
def token_for(settings) -> Callable[[User], str]:
    signer = SessionSigner(settings.token_secret)
    return lambda user: signer.issue(user.id)


@pytest.fixture
def headers_for(token_for) -> Callable[[User], dict]:
    return lambda user: {"Authorization": f"Bearer {token_for(user)}"}
