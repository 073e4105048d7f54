# src/taskboard/core/dates.py

"""
Timestamp helpers.

Stores return timestamps as ISO-8601 strings in UTC. Everything user-facing
(calendar days for filtering, display strings) is computed in local time.
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, tzinfo

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "%m/%d/%Y, %I:%M:%S %p"


def utc_now() -> datetime:
    return datetime.now(UTC)


def parse_timestamp(raw: str | datetime | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    - Trailing "Z" is accepted.
    - Naive values are assumed to be UTC.
    - Invalid input returns None.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        dt = raw
    else:
        s = str(raw).strip()
        if not s:
            return None
        if s.endswith("Z") or s.endswith("z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            logger.debug("Invalid timestamp string: %r", raw)
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def to_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()


def local_day(dt: datetime, tz: tzinfo | None = None) -> date:
    """Calendar day of dt in tz (system local time when tz is None), time-of-day stripped."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(tz).date()


def parse_day(raw: str) -> date:
    """Parse a YYYY-MM-DD day. Raises ValueError on bad input."""
    return date.fromisoformat(raw.strip())


def format_timestamp(dt: datetime | None, fmt: str = DEFAULT_FORMAT, tz: tzinfo | None = None) -> str:
    if dt is None:
        return "N/A"
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(tz).strftime(fmt)


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}{'' if n == 1 else 's'} ago"


def format_relative(dt: datetime | None, now: datetime | None = None) -> str:
    """
    Relative age: "just now", "5 minutes ago", "2 hours ago", "3 days ago".
    Anything a week or older falls back to M/D/YYYY.
    """
    if dt is None:
        return "N/A"
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    if now is None:
        now = utc_now()

    seconds = int((now - dt).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if seconds < 60:
        return "just now"
    if minutes < 60:
        return _plural(minutes, "minute")
    if hours < 24:
        return _plural(hours, "hour")
    if days < 7:
        return _plural(days, "day")
    local = dt.astimezone()
    return f"{local.month}/{local.day}/{local.year}"
