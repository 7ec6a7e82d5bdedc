"""
Clock service.
Wraps "now" and calendar-day boundaries in the reference timezone.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timeclock.domain.models.base import ValidationError


InstantLike = Union[datetime, date, str]


@dataclass(frozen=True)
class DayWindow:
    """Closed instant range covering one or more calendar days."""

    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


def to_utc(value: datetime) -> datetime:
    """Convert an aware datetime to UTC; naive values are assumed to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def coerce_number(value: Any, field: str) -> Optional[float]:
    """
    Coerce an optional numeric input to float.
    Accepts ints, floats, Decimals and numeric strings; None stays None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field)
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(Decimal(value.strip()))
        except InvalidOperation:
            raise ValidationError(f"{field} must be a number", field)
    else:
        raise ValidationError(f"{field} must be a number", field)

    if number != number or number in (float("inf"), float("-inf")):
        raise ValidationError(f"{field} must be a finite number", field)
    return number


class Clock:
    """
    Date/time utility bound to a reference timezone.
    Naive inputs are interpreted as local time in the reference timezone;
    every instant it returns is timezone-aware UTC.
    """

    def __init__(self, timezone_name: str = "UTC"):
        try:
            self.zone = ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationError(f"Unknown timezone: {timezone_name}", "timezone")
        self.timezone_name = timezone_name

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def parse_instant(self, value: InstantLike, field: str = "value") -> datetime:
        """
        Parse an ISO-8601 string, date or datetime into an aware UTC instant.
        Raises ValidationError when the value cannot be parsed.
        """
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            parsed = datetime.combine(value, time.min)
        elif isinstance(value, str) and value.strip():
            try:
                parsed = datetime.fromisoformat(value.strip())
            except ValueError:
                raise ValidationError(f"{field} is not a valid date/time: {value!r}", field)
        else:
            raise ValidationError(f"{field} is not a valid date/time: {value!r}", field)

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=self.zone)
        return parsed.astimezone(timezone.utc)

    def calendar_day(self, value: InstantLike, field: str = "date") -> date:
        """Calendar day of an instant, as seen in the reference timezone."""
        if isinstance(value, date) and not isinstance(value, datetime):
            return value
        return self.parse_instant(value, field).astimezone(self.zone).date()

    def start_of_day(self, value: InstantLike, field: str = "date") -> datetime:
        day = self.calendar_day(value, field)
        return datetime.combine(day, time.min, tzinfo=self.zone).astimezone(timezone.utc)

    def end_of_day(self, value: InstantLike, field: str = "date") -> datetime:
        day = self.calendar_day(value, field)
        next_day = datetime.combine(day + timedelta(days=1), time.min, tzinfo=self.zone)
        return (next_day - timedelta(microseconds=1)).astimezone(timezone.utc)

    def day_window(self, value: InstantLike, field: str = "date") -> DayWindow:
        """[00:00:00, 23:59:59.999999] of the value's calendar day."""
        return DayWindow(self.start_of_day(value, field), self.end_of_day(value, field))

    def range_window(self, start: InstantLike, end: InstantLike) -> DayWindow:
        """
        Window spanning whole calendar days from start to end, inclusive.
        Raises ValidationError when start falls after end.
        """
        start_day = self.calendar_day(start, "start_date")
        end_day = self.calendar_day(end, "end_date")
        if start_day > end_day:
            raise ValidationError("start_date must be on or before end_date", "start_date")
        return DayWindow(self.start_of_day(start_day), self.end_of_day(end_day))
