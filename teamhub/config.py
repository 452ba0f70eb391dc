"""
config.py — environment variables and application constants.
"""
from __future__ import annotations

import functools
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ── Fixed policy ──────────────────────────────────────────────────────────────
OTP_TTL_SECONDS: int = 5 * 60
SESSION_TTL_SECONDS: int = 48 * 3600
SESSION_SALT: str = "session"
PASSWORD_MIN_LENGTH: int = 6
COUNTRY_CODE_PATTERN: str = r"^\+\d{1,4}$"
MOBILE_NUMBER_PATTERN: str = r"^\d{10}$"

OTP_PURPOSE_VERIFICATION = "verification"
OTP_PURPOSE_PASSWORD_RESET = "password_reset"

MAIL_MODE_INLINE = "inline"
MAIL_MODE_QUEUE = "queue"

# ── Uploads ───────────────────────────────────────────────────────────────────
UPLOAD_KINDS: dict[str, dict] = {
    "avatars": {"prefix": "avatar", "mime": "image/", "max_bytes": 5 * 1024 * 1024},
    "blogs": {"prefix": "blog", "mime": "image/", "max_bytes": 10 * 1024 * 1024},
    "videos": {"prefix": "video", "mime": "video/", "max_bytes": 100 * 1024 * 1024},
    "teamavatars": {"prefix": "team", "mime": "image/", "max_bytes": 5 * 1024 * 1024},
}

# ── Pagination ────────────────────────────────────────────────────────────────
DEFAULT_PAGE_SIZE: int = 10
MAX_PAGE_SIZE: int = 100

# ── Background jobs ───────────────────────────────────────────────────────────
PURGE_INTERVAL_SECONDS: int = 10 * 60
MAIL_RETRY_ATTEMPTS: int = 5
MAIL_RETRY_DELAY: int = 15          # seconds


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes")


@dataclass
class MailSettings:
    sendgrid_api_key: str = ""
    from_email: str = ""
    delivery_mode: str = MAIL_MODE_INLINE

    @property
    def configured(self) -> bool:
        return bool(self.sendgrid_api_key and self.from_email)


@dataclass
class Settings:
    token_secret: str
    uploads_dir: Path = Path("uploads")
    otp_length: int = 6
    allow_resend_when_verified: bool = False
    redis_url: str = "redis://localhost:6379/0"
    cors_origins: list[str] = field(default_factory=list)
    mail: MailSettings = field(default_factory=MailSettings)

    @classmethod
    def from_env(cls) -> "Settings":
        origins = [
            o.strip()
            for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
            if o.strip()
        ]
        return cls(
            token_secret=os.environ.get("TOKEN_SECRET", "change-me"),
            uploads_dir=Path(os.getenv("UPLOADS_DIR", "uploads")),
            otp_length=int(os.getenv("OTP_LENGTH", "6")),
            allow_resend_when_verified=_env_bool("ALLOW_RESEND_WHEN_VERIFIED"),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            cors_origins=origins,
            mail=MailSettings(
                sendgrid_api_key=os.getenv("SENDGRID_API_KEY", ""),
                from_email=os.getenv("MAIL_FROM_EMAIL", ""),
                delivery_mode=os.getenv("MAIL_DELIVERY_MODE", MAIL_MODE_INLINE).lower(),
            ),
        )


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
