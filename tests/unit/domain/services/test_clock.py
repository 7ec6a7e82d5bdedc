"""
Unit tests for the Clock service.
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from timeclock.domain.models.base import ValidationError
from timeclock.domain.services.clock import Clock, DayWindow, coerce_number, to_utc


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestClockParsing:
    """Test cases for instant parsing."""

    def test_parse_utc_string(self):
        """Test strings with a Z suffix."""
        clock = Clock("UTC")

        assert clock.parse_instant("2025-11-03T08:00:00Z") == utc(2025, 11, 3, 8)

    def test_parse_offset_string(self):
        """Test explicit offsets are converted to UTC."""
        clock = Clock("Europe/Madrid")

        parsed = clock.parse_instant("2025-11-03T09:00:00+01:00")

        assert parsed == utc(2025, 11, 3, 8)
        assert parsed.tzinfo == timezone.utc

    def test_naive_string_uses_reference_timezone(self):
        """Test naive inputs are local time in the reference timezone."""
        clock = Clock("America/New_York")

        assert clock.parse_instant("2025-07-15T08:00:00") == utc(2025, 7, 15, 12)

    def test_date_only_string(self):
        """Test a calendar day is parsed as its midnight."""
        clock = Clock("UTC")

        assert clock.parse_instant("2025-11-03") == utc(2025, 11, 3)

    def test_date_object(self):
        """Test date objects are accepted."""
        clock = Clock("America/New_York")

        assert clock.parse_instant(date(2025, 1, 10)) == utc(2025, 1, 10, 5)

    def test_naive_datetime(self):
        """Test naive datetime objects follow the reference timezone."""
        clock = Clock("UTC")

        assert clock.parse_instant(datetime(2025, 11, 3, 8, 30)) == utc(2025, 11, 3, 8, 30)

    @pytest.mark.parametrize("value", ["", "   ", "not a date", "2025-13-45", None, 42])
    def test_invalid_values(self, value):
        """Test unparseable inputs are invalid."""
        clock = Clock("UTC")

        with pytest.raises(ValidationError) as exc_info:
            clock.parse_instant(value, "entry_time")

        assert exc_info.value.field == "entry_time"
        assert exc_info.value.code == "INVALID_INPUT"

    def test_unknown_timezone(self):
        """Test the clock refuses unknown zones."""
        with pytest.raises(ValidationError):
            Clock("Mars/Olympus_Mons")


class TestClockDays:
    """Test cases for calendar-day boundaries."""

    def test_calendar_day_follows_reference_timezone(self):
        """Test an instant after UTC midnight still belongs to the local day."""
        clock = Clock("America/New_York")

        assert clock.calendar_day("2025-07-16T02:00:00Z") == date(2025, 7, 15)

    def test_day_window_bounds(self):
        """Test the window covers exactly one day."""
        clock = Clock("UTC")

        window = clock.day_window("2025-11-03T15:20:00Z")

        assert window.start == utc(2025, 11, 3)
        assert window.end == utc(2025, 11, 3, 23, 59, 59, 999999)
        assert window.contains(utc(2025, 11, 3, 23, 59, 59))
        assert not window.contains(utc(2025, 11, 4))

    def test_day_window_in_other_timezone(self):
        """Test windows are computed in local time."""
        clock = Clock("Europe/Madrid")

        window = clock.day_window(date(2025, 11, 3))

        assert window.start == utc(2025, 11, 2, 23)
        assert window.end == utc(2025, 11, 3, 22, 59, 59, 999999)

    def test_range_window_is_inclusive(self):
        """Test range windows span the whole end day."""
        clock = Clock("UTC")

        window = clock.range_window("2025-11-01", "2025-11-05")

        assert window == DayWindow(utc(2025, 11, 1), utc(2025, 11, 5, 23, 59, 59, 999999))

    def test_range_window_single_day(self):
        """Test a range with equal bounds."""
        clock = Clock("UTC")

        window = clock.range_window("2025-11-03", "2025-11-03")

        assert window.start == utc(2025, 11, 3)

    def test_range_window_reversed(self):
        """Test start after end is invalid."""
        clock = Clock("UTC")

        with pytest.raises(ValidationError) as exc_info:
            clock.range_window("2025-11-05", "2025-11-01")

        assert exc_info.value.field == "start_date"


class TestHelpers:
    """Test cases for module helpers."""

    def test_to_utc(self):
        """Test naive values are taken as UTC."""
        assert to_utc(datetime(2025, 11, 3, 8)) == utc(2025, 11, 3, 8)
        assert to_utc(datetime(2025, 11, 3, 8)).tzinfo == timezone.utc

    @pytest.mark.parametrize("value, expected", [
        (None, None),
        (0, 0.0),
        (12, 12.0),
        (7.5, 7.5),
        ("120.5", 120.5),
        (" 3 ", 3.0),
        (Decimal("2.25"), 2.25),
    ])
    def test_coerce_number(self, value, expected):
        """Test accepted numeric inputs."""
        assert coerce_number(value, "daily_rate") == expected

    @pytest.mark.parametrize("value", ["abc", "", True, "nan", "inf", [1]])
    def test_coerce_number_rejects(self, value):
        """Test non-numeric inputs."""
        with pytest.raises(ValidationError) as exc_info:
            coerce_number(value, "daily_rate")

        assert exc_info.value.field == "daily_rate"
