from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Tuple


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def day_window(day: date | datetime) -> Tuple[datetime, datetime]:
    """Return the half-open calendar-day window [00:00, next day 00:00)."""
    if isinstance(day, datetime):
        day = day.date()
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def to_epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def isoformat_or_none(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def parse_iso_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value)
