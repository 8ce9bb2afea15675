from __future__ import annotations

from datetime import datetime, time

import pytest

from pocketledger.services import periods


def test_month_period_covers_whole_month():
    period = periods.month_period(2, 2024)

    assert period.start_date == datetime(2024, 2, 1)
    assert period.end_date == datetime.combine(datetime(2024, 2, 29).date(), time.max)
    assert period.label == "February 2024"


def test_month_period_rejects_invalid_month():
    with pytest.raises(ValueError):
        periods.month_period(13, 2024)


def test_period_boundaries_are_inclusive():
    period = periods.month_period(3, 2024)

    assert periods.is_within_period(datetime(2024, 3, 1, 0, 0), period)
    assert periods.is_within_period(datetime(2024, 3, 31, 23, 59, 59, 999999), period)
    assert not periods.is_within_period(datetime(2024, 4, 1, 0, 0), period)
    assert not periods.is_within_period(datetime(2024, 2, 29, 23, 59, 59), period)


def test_previous_month_rolls_over_year():
    period = periods.previous_month(datetime(2024, 1, 10))

    assert period.start_date == datetime(2023, 12, 1)
    assert period.label == "December 2023"


def test_last_months_most_recent_first():
    result = periods.last_months(3, datetime(2024, 2, 10))

    assert [p.label for p in result] == ["February 2024", "January 2024", "December 2023"]


def test_last_days_oldest_first_ending_today():
    days = periods.last_days(3, datetime(2024, 3, 1, 15, 0))

    assert days == [datetime(2024, 2, 28), datetime(2024, 2, 29), datetime(2024, 3, 1)]


def test_is_today_compares_calendar_dates():
    now = datetime(2024, 3, 15, 23, 0)

    assert periods.is_today(datetime(2024, 3, 15, 0, 1), now)
    assert not periods.is_today(datetime(2024, 3, 14, 23, 59), now)


def test_current_month_contains_now():
    now = datetime(2024, 12, 31, 23, 59)
    period = periods.current_month(now)

    assert period.label == "December 2024"
    assert periods.is_within_period(now, period)
