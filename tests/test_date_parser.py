"""Tests for date parser and period helpers."""

import pytest
from datetime import date

from billwise.utils.date_parser import (
    get_period_bounds,
    month_end,
    month_start,
    parse_date,
    shift_month,
)

TODAY = date(2024, 3, 13)


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    assert parse_date("2024-01-15") == date(2024, 1, 15)
    assert parse_date("January 15, 2024") == date(2024, 1, 15)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("today", date(2024, 3, 13)),
        ("Yesterday", date(2024, 3, 12)),
        (" tomorrow ", date(2024, 3, 14)),
        ("this month", date(2024, 3, 1)),
        ("next month", date(2024, 4, 1)),
        ("last month", date(2024, 2, 1)),
    ],
)
def test_parse_relative_dates(value, expected):
    """Relative expressions resolve against the reference date."""
    assert parse_date(value, today=TODAY) == expected


def test_parse_today_defaults_to_current_date():
    assert parse_date("today") == date.today()


def test_parse_invalid_date():
    """Test that an unparseable date raises ValueError."""
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("not a date")


def test_month_helpers():
    assert month_start(2024, 2) == date(2024, 2, 1)
    assert month_end(2024, 2) == date(2024, 2, 29)
    assert month_end(2023, 12) == date(2023, 12, 31)
    assert shift_month(2024, 12, 1) == (2025, 1)
    assert shift_month(2024, 1, -1) == (2023, 12)


@pytest.mark.parametrize(
    "period,expected",
    [
        ("this-week", (date(2024, 3, 11), date(2024, 3, 17))),
        ("this-month", (date(2024, 3, 1), date(2024, 3, 31))),
        ("next-month", (date(2024, 4, 1), date(2024, 4, 30))),
        ("this-year", (date(2024, 1, 1), date(2024, 12, 31))),
    ],
)
def test_get_period_bounds(period, expected):
    assert get_period_bounds(period, today=TODAY) == expected


def test_get_period_bounds_rejects_unknown_period():
    with pytest.raises(ValueError, match="Unknown period"):
        get_period_bounds("last-decade", today=TODAY)
