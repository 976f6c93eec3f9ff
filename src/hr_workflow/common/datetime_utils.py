from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional
from zoneinfo import ZoneInfo


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp (a trailing ``Z`` means UTC)."""
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    return datetime.fromisoformat(v)


def now_local() -> datetime:
    """Current time, aware, in the server's zone.

    Aware so ``local_time_of_day``/``local_date`` can move it onto the
    site's wall clock. Wrapped so tests can swap the clock.
    """
    return datetime.now().astimezone()


def local_time_of_day(timestamp: datetime, tz_name: Optional[str] = None) -> time:
    """Time of day of ``timestamp`` on the site's wall clock.

    Naive timestamps are taken as already local.
    """
    if timestamp.tzinfo is not None and tz_name:
        timestamp = timestamp.astimezone(ZoneInfo(tz_name))
    return timestamp.time().replace(tzinfo=None)


def local_date(timestamp: datetime, tz_name: Optional[str] = None) -> date:
    if timestamp.tzinfo is not None and tz_name:
        timestamp = timestamp.astimezone(ZoneInfo(tz_name))
    return timestamp.date()


def inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1


def month_bounds(year: int, month: int) -> tuple[date, date]:
    first = date(int(year), int(month), 1)
    if first.month == 12:
        nxt = date(first.year + 1, 1, 1)
    else:
        nxt = date(first.year, first.month + 1, 1)
    return first, date.fromordinal(nxt.toordinal() - 1)
