"""Calendar-month and rolling date ranges used to scope summaries."""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional


@dataclass(frozen=True)
class Period:
    """Closed interval ``[start_date, end_date]`` with an optional display label."""

    start_date: datetime
    end_date: datetime
    label: Optional[str] = None


def _shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Return (year, month) moved by ``offset`` months, rolling the year as needed."""

    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def month_period(month: int, year: int) -> Period:
    """Return the full calendar month ``month`` (1-12) of ``year``."""

    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")
    last_day = monthrange(year, month)[1]
    start = datetime(year, month, 1)
    end = datetime.combine(start.replace(day=last_day).date(), time.max)
    return Period(start_date=start, end_date=end, label=start.strftime("%B %Y"))


def current_month(now: Optional[datetime] = None) -> Period:
    """Return the calendar month containing ``now``."""

    now = now or datetime.now()
    return month_period(now.month, now.year)


def previous_month(now: Optional[datetime] = None) -> Period:
    """Return the calendar month before the one containing ``now``."""

    now = now or datetime.now()
    year, month = _shift_month(now.year, now.month, -1)
    return month_period(month, year)


def last_months(count: int, now: Optional[datetime] = None) -> list[Period]:
    """Return ``count`` calendar months ending with the current one, most recent first."""

    now = now or datetime.now()
    periods: list[Period] = []
    for offset in range(count):
        year, month = _shift_month(now.year, now.month, -offset)
        periods.append(month_period(month, year))
    return periods


def is_within_period(timestamp: datetime, period: Period) -> bool:
    """Inclusive on both ends."""

    return period.start_date <= timestamp <= period.end_date


def is_today(timestamp: datetime, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now()
    return timestamp.date() == now.date()


def last_days(count: int, now: Optional[datetime] = None) -> list[datetime]:
    """Return midnights of the last ``count`` days, oldest first, ending today."""

    today = datetime.combine((now or datetime.now()).date(), time.min)
    return [today - timedelta(days=offset) for offset in range(count - 1, -1, -1)]


__all__ = [
    "Period",
    "current_month",
    "is_today",
    "is_within_period",
    "last_days",
    "last_months",
    "month_period",
    "previous_month",
]
