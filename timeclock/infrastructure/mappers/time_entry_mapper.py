"""
Time entry mapper for converting between domain entities and database models.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from timeclock.domain.models.time_entry import TimeEntry, TimeEntryStatus
from timeclock.domain.services.clock import to_utc
from timeclock.infrastructure.db.models import TimeEntryModel


def _instant(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive values; everything is stored in UTC
    return to_utc(value) if value is not None else None


def _number(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return float(value)
    return value


class TimeEntryMapper:
    """Maps between TimeEntry domain entity and TimeEntryModel database model."""

    def domain_to_model(self, time_entry: TimeEntry) -> TimeEntryModel:
        """Convert TimeEntry domain entity to TimeEntryModel."""
        return TimeEntryModel(
            id=time_entry.id,
            employee_id=time_entry.employee_id,
            date=_instant(time_entry.date),
            entry_time=_instant(time_entry.entry_time),
            exit_time=_instant(time_entry.exit_time),
            status=TimeEntryStatus(time_entry.status),
            notes=time_entry.notes,
            daily_rate=time_entry.daily_rate,
            extra_hours=time_entry.extra_hours,
            extra_hours_rate=time_entry.extra_hours_rate,
            total=time_entry.total,
            regular_hours=time_entry.regular_hours,
            total_hours=time_entry.total_hours,
            approved_by=time_entry.approved_by,
            approved_at=_instant(time_entry.approved_at),
            rejected_by=time_entry.rejected_by,
            rejected_at=_instant(time_entry.rejected_at),
            rejected_reason=time_entry.rejected_reason,
        )

    def model_to_domain(self, model: TimeEntryModel) -> TimeEntry:
        """Convert TimeEntryModel to TimeEntry domain entity."""
        return TimeEntry(
            id=model.id,
            employee_id=model.employee_id,
            date=_instant(model.date),
            entry_time=_instant(model.entry_time),
            exit_time=_instant(model.exit_time),
            status=TimeEntryStatus(model.status) if model.status else TimeEntryStatus.PENDING,
            notes=model.notes,
            daily_rate=_number(model.daily_rate),
            extra_hours=_number(model.extra_hours),
            extra_hours_rate=_number(model.extra_hours_rate),
            total=_number(model.total),
            regular_hours=_number(model.regular_hours),
            total_hours=_number(model.total_hours),
            approved_by=model.approved_by,
            approved_at=_instant(model.approved_at),
            rejected_by=model.rejected_by,
            rejected_at=_instant(model.rejected_at),
            rejected_reason=model.rejected_reason,
            created_at=_instant(model.created_at),
            updated_at=_instant(model.updated_at),
        )

    def changes_to_columns(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Normalize a partial update into column values."""
        columns = {}
        for key, value in changes.items():
            if isinstance(value, datetime):
                value = to_utc(value)
            elif key == "status" and value is not None:
                value = TimeEntryStatus(value)
            columns[key] = value
        return columns
