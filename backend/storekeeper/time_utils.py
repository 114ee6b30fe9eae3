"""
Time handling for the store document.

Every datetime the store keeps is UTC without tzinfo. Strings in the
document and the API use ISO-8601 with a trailing "Z"; the store timezone
from settings only matters when grouping by local day or month.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo

# A clock returns the current time as a UTC-naive datetime.
Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Read an ISO-8601 string into a UTC-naive datetime.

    Blank input gives None. Values without an offset are taken as UTC;
    values with "Z" or an offset are shifted to UTC.
    """
    if value is None or not value.strip():
        return None
    text = value.strip()
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with "Z"; naive input counts as UTC. Microseconds survive the round trip."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.isoformat() + "Z"


def to_store_local(dt: datetime, tz_name: str) -> datetime:
    """Shift a stored UTC-naive datetime into the store's timezone."""
    return dt.replace(tzinfo=timezone.utc).astimezone(ZoneInfo(tz_name))
