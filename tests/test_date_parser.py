"""Tests for date parser with relative dates."""

import pytest
from datetime import date, timedelta
from pocketledger.utils.date_parser import parse_date


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    result = parse_date("2024-01-15")
    assert result == date(2024, 1, 15)


def test_parse_today():
    """Test parsing 'today'."""
    result = parse_date("today")
    assert result == date.today()


def test_parse_yesterday_and_tomorrow():
    """Test parsing 'yesterday' and 'tomorrow'."""
    assert parse_date("yesterday") == date.today() - timedelta(days=1)
    assert parse_date("Tomorrow") == date.today() + timedelta(days=1)


def test_parse_month_keywords_with_reference():
    """Month keywords resolve to the first day of that month."""
    reference = date(2024, 1, 20)
    assert parse_date("last month", today=reference) == date(2023, 12, 1)
    assert parse_date("this month", today=reference) == date(2024, 1, 1)
    assert parse_date("next month", today=reference) == date(2024, 2, 1)


def test_parse_in_n_months_clamps():
    """Test 'in N months' keeps the day, clamped to month end."""
    reference = date(2024, 1, 31)
    assert parse_date("in 1 month", today=reference) == date(2024, 2, 29)
    assert parse_date("in 3 months", today=reference) == date(2024, 4, 30)


def test_parse_invalid_relative():
    """Test parsing invalid relative date."""
    with pytest.raises(ValueError):
        parse_date("last invalid")


def test_parse_empty():
    with pytest.raises(ValueError):
        parse_date("  ")


def test_parse_standard_formats():
    """Test parsing various standard date formats."""
    # These should all work via dateutil parser
    assert parse_date("January 15, 2024") == date(2024, 1, 15)
    assert parse_date("15/01/2024") == date(2024, 1, 15)
