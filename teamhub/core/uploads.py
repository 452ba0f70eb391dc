"""
core/uploads.py — Disk storage for avatars, blog thumbnails, videos and team photos.
"""
from __future__ import annotations

import logging
import os
import secrets
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from ..config import UPLOAD_KINDS
from .errors import ValidationError

logger = logging.getLogger(__name__)


def _unique_name(prefix: str, filename: str) -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
    return f"{prefix}-{suffix}{ext}"


async def save_upload(upload: Optional[UploadFile], kind: str, uploads_root: Path) -> Optional[str]:
    """
    Persist `upload` under uploads_root/<kind>/ and return its public path
    (``/uploads/<kind>/<name>``). Returns None when no file was sent.
    """
    if upload is None or not upload.filename:
        return None

    rules = UPLOAD_KINDS[kind]
    content_type = upload.content_type or ""
    if not content_type.startswith(rules["mime"]):
        noun = "video" if rules["mime"] == "video/" else "image"
        raise ValidationError(f"Only {noun} files are allowed!")

    data = await upload.read()
    if len(data) > rules["max_bytes"]:
        limit_mb = rules["max_bytes"] // (1024 * 1024)
        raise ValidationError(f"File exceeds {limit_mb} MB limit.")

    target_dir = Path(uploads_root) / kind
    target_dir.mkdir(parents=True, exist_ok=True)
    name = _unique_name(rules["prefix"], upload.filename)
    (target_dir / name).write_bytes(data)
    logger.info("Stored %s upload %s (%d bytes)", kind, name, len(data))
    return f"/uploads/{kind}/{name}"


def discard_upload(public_path: Optional[str], uploads_root: Path) -> None:
    """Remove a file previously returned by save_upload; missing files are ignored."""
    if not public_path:
        return
    relative = public_path.removeprefix("/uploads/")
    target = Path(uploads_root) / relative
    try:
        target.unlink()
    except FileNotFoundError:
        return
    logger.info("Discarded upload %s", relative)


@asynccontextmanager
async def stored_upload(upload: Optional[UploadFile], kind: str, uploads_root: Path):
    """
    Save `upload` and yield its public path. If the block raises, the stored
    file is deleted before the error propagates, so a rejected request leaves
    nothing behind on disk.
    """
    public_path = await save_upload(upload, kind, uploads_root)
    try:
        yield public_path
    except BaseException:
        discard_upload(public_path, uploads_root)
        raise
