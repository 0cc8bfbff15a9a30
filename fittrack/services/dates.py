"""Calendar date keys and week/month ranges. Weeks start on Sunday."""

from __future__ import annotations

from calendar import monthrange
from datetime import date, timedelta


def date_key(d: date) -> str:
    """YYYY-MM-DD key used to join assignments, completions, counts, timers and logs."""
    return d.isoformat()


def parse_date_key(key: str) -> date:
    return date.fromisoformat(key)


def week_start(d: date) -> date:
    """Sunday on or before d."""
    # date.weekday(): Monday=0 ... Sunday=6
    return d - timedelta(days=(d.weekday() + 1) % 7)


def weekday_index(d: date) -> int:
    """0=Sunday ... 6=Saturday."""
    return (d.weekday() + 1) % 7


def week_dates(d: date) -> list[date]:
    start = week_start(d)
    return date_range(start, start + timedelta(days=6))


def month_dates(d: date) -> list[date]:
    days_in_month = monthrange(d.year, d.month)[1]
    return date_range(d.replace(day=1), d.replace(day=days_in_month))


def date_range(start: date, end: date) -> list[date]:
    """Inclusive range; empty when end < start."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]
