"""
Timestamps.

GeoPin stores audit timestamps as timezone-aware UTC datetimes. The store takes a
clock callable so the caller decides when "now" is, and tests can pin it.
SQLite hands datetimes back naive, so reads go through `ensure_utc`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive values and convert aware values to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_local(dt: datetime, tz_name: str) -> datetime:
    """Render a stored timestamp in the configured display timezone."""
    return ensure_utc(dt).astimezone(ZoneInfo(tz_name))
