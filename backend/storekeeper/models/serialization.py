"""Field codecs shared by the snapshot entities."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from ..time_utils import parse_iso_datetime, to_utc_z


def dump_decimal(value: Decimal | None) -> str | None:
    if value is None:
        return None
    return str(value)


def load_decimal(value) -> Decimal | None:
    # Older documents stored plain JSON numbers
    if value is None:
        return None
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def dump_datetime(value: datetime | None) -> str | None:
    return to_utc_z(value)


def load_datetime(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return parse_iso_datetime(value)
