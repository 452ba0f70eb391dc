"""
core/maintenance.py — TTL housekeeping for OTPs and revoked tokens.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..auth import blacklist, otp_ledger

logger = logging.getLogger(__name__)


def purge_expired_records(now: Optional[datetime] = None) -> dict[str, int]:
    """Delete OTPs past their 5-minute window and blacklist rows past token lifetime."""
    removed = {
        "otps": otp_ledger.purge_expired_otps(now),
        "blacklisted_tokens": blacklist.purge_expired_tokens(now),
    }
    if any(removed.values()):
        logger.info("Purged expired records: %s", removed)
    return removed
