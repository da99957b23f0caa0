# Rev 1.0.0

"""Timestamp helpers."""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional


def now_iso(now: Optional[datetime] = None) -> str:
    """UTC ISO-8601 with millisecond precision and a trailing ``Z``."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def filesystem_timestamp(now: Optional[datetime] = None) -> str:
    # 2026-10-16T08:15:30.123Z -> 2026-10-16T08-15-30-123Z
    return now_iso(now).replace(":", "-").replace(".", "-")
