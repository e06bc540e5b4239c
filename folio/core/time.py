"""folio.core.time

Calendar-day helpers.

The engine works in calendar dates, never datetimes. Timezones are the
caller's problem.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta


def parse_date(value: str | date) -> date:
    """Parse an ISO-8601 date (or datetime) string into a calendar date.

    Accepts `YYYY-MM-DD`, full ISO datetimes (time part dropped) and `date`
    instances, which are returned unchanged.

    Raises:
        ValueError: if parsing fails.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    v = value.strip()
    if len(v) > 10:
        if v.endswith("Z"):
            v = v[:-1] + "+00:00"
        return datetime.fromisoformat(v).date()
    return date.fromisoformat(v)


def calendar_days(start: date, end: date) -> list[date]:
    """Every calendar day from `start` to `end`, both inclusive."""

    out: list[date] = []
    current = start
    step = timedelta(days=1)
    while current <= end:
        out.append(current)
        current += step
    return out


def days_between(start: date, end: date) -> int:
    return (end - start).days
