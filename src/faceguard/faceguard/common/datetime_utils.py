from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Organisation timezone; falls back to the host's local zone when unset."""
    if name and name.upper() == "UTC":
        return timezone.utc
    if name:
        return ZoneInfo(name)
    return datetime.now().astimezone().tzinfo


def now_local(tz: Optional[tzinfo] = None) -> datetime:
    """Current time as an aware datetime."""
    return datetime.now(tz) if tz else datetime.now().astimezone()


def local_day(value: datetime, tz: Optional[tzinfo] = None) -> date:
    """Calendar day of ``value`` as seen in ``tz``.

    Naive datetimes are taken to be wall-clock time already.
    """
    if value.tzinfo is None or tz is None:
        return value.date()
    return value.astimezone(tz).date()


def to_iso(value: datetime) -> str:
    return value.isoformat()


def parse_iso(value: str) -> datetime:
    # Browsers emit a trailing "Z", which fromisoformat rejects before 3.11.
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
