"""
main.py — TeamHub API server.

Serves the REST API (auth, teams, blogs, videos, products, users) and the
uploaded media under /uploads. Settings come from the environment, or a .env
file in the working directory:

  TOKEN_SECRET        signing key for session tokens
  UPLOADS_DIR         where avatars, thumbnails, videos and team photos land
  SENDGRID_API_KEY    OTP mail transport; without it codes are only logged
  MAIL_DELIVERY_MODE  "inline" (send during the request) or "queue" (Celery)
  HOST / PORT / RELOAD / LOG_LEVEL   server options

Run with:
  uvicorn teamhub.main:app --host 0.0.0.0 --port 8000
or:
  teamhub-api
"""
from __future__ import annotations

import logging
import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from .api.app import create_app  # noqa: E402

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = create_app()


def serve() -> None:
    uvicorn.run(
        "teamhub.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "false").lower() == "true",
    )


if __name__ == "__main__":
    serve()
