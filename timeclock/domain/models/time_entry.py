"""
TimeEntry domain model.
Represents one attendance record: an employee's clock-in/clock-out for a
calendar day, its derived hours and its approval state.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Dict, Any, Tuple
from enum import Enum

from timeclock.domain.models.base import (
    BaseEntity,
    ValidationError,
    ExitAlreadyRegisteredError,
    utcnow,
)


class TimeEntryStatus(str, Enum):
    """Time entry approval status."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Fields a general update may touch; employee and date are immutable.
EDITABLE_FIELDS = frozenset({
    "entry_time",
    "exit_time",
    "notes",
    "status",
    "daily_rate",
    "extra_hours",
    "extra_hours_rate",
    "total",
})

HOUR_INPUT_FIELDS = frozenset({"entry_time", "exit_time", "extra_hours"})


def diff_hours(start: datetime, end: datetime) -> float:
    """Fractional hours elapsed between two aware instants."""
    return (end - start).total_seconds() / 3600


def round_hours(value: float) -> float:
    """Round hours half-up to two decimals."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def calculate_hours(
    entry_time: Optional[datetime],
    exit_time: Optional[datetime],
    extra_hours: Optional[float] = None
) -> Tuple[Optional[float], Optional[float]]:
    """
    Compute (regular_hours, total_hours) for a pair of boundary instants.
    Both are None unless entry and exit are known.
    """
    if entry_time is None or exit_time is None:
        return None, None

    if exit_time < entry_time:
        raise ValidationError("Exit time cannot be before entry time", "exit_time")

    regular_hours = round_hours(diff_hours(entry_time, exit_time))
    total_hours = round_hours(regular_hours + (extra_hours or 0))
    return regular_hours, total_hours


@dataclass(eq=False, kw_only=True)
class TimeEntry(BaseEntity):
    """
    TimeEntry entity.
    One record per employee per calendar day; `date` holds the start-of-day
    instant of that day in the reference timezone.
    """

    employee_id: str
    date: datetime
    entry_time: datetime
    exit_time: Optional[datetime] = None
    status: TimeEntryStatus = TimeEntryStatus.PENDING
    notes: Optional[str] = None

    # Caller supplied figures, stored as given
    daily_rate: Optional[float] = None
    extra_hours: Optional[float] = None
    extra_hours_rate: Optional[float] = None
    total: Optional[float] = None

    # Derived
    regular_hours: Optional[float] = None
    total_hours: Optional[float] = None

    # Approval workflow
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    rejected_reason: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.status, TimeEntryStatus):
            self.status = parse_status(self.status)

    def validate(self) -> None:
        """Validate time entry state."""
        if not self.employee_id:
            raise ValidationError("Employee is required", "employee")

        if self.date is None:
            raise ValidationError("Date is required", "date")

        if self.entry_time is None:
            raise ValidationError("Entry time is required", "entry_time")

        if self.exit_time is not None and self.exit_time < self.entry_time:
            raise ValidationError("Exit time cannot be before entry time", "exit_time")

    @property
    def has_exit(self) -> bool:
        return self.exit_time is not None

    def recalculate_hours(self) -> None:
        """Recompute both derived fields together, or clear both."""
        self.regular_hours, self.total_hours = calculate_hours(
            self.entry_time, self.exit_time, self.extra_hours
        )

    @classmethod
    def create(
        cls,
        employee_id: str,
        date: datetime,
        entry_time: datetime,
        exit_time: Optional[datetime] = None,
        status: Optional[TimeEntryStatus] = None,
        notes: Optional[str] = None,
        daily_rate: Optional[float] = None,
        extra_hours: Optional[float] = None,
        extra_hours_rate: Optional[float] = None,
        total: Optional[float] = None,
        created_by: Optional[str] = None
    ) -> "TimeEntry":
        """
        Create a new time entry.
        The creating actor, when known, is recorded as approver.
        """
        entry = cls(
            employee_id=employee_id,
            date=date,
            entry_time=entry_time,
            exit_time=exit_time,
            status=status or TimeEntryStatus.PENDING,
            notes=notes,
            daily_rate=daily_rate,
            extra_hours=extra_hours,
            extra_hours_rate=extra_hours_rate,
            total=total,
            approved_by=created_by,
        )
        entry.validate()
        entry.recalculate_hours()
        return entry

    def register_exit(self, exit_time: datetime, actor_id: str) -> Dict[str, Any]:
        """
        Set the exit time once and return the changed fields.
        Raises ExitAlreadyRegisteredError if an exit is already recorded.
        """
        if self.has_exit:
            raise ExitAlreadyRegisteredError(self.id)

        regular_hours, total_hours = calculate_hours(self.entry_time, exit_time, self.extra_hours)
        changes = {
            "exit_time": exit_time,
            "regular_hours": regular_hours,
            "total_hours": total_hours,
            "approved_by": actor_id,
        }
        self._apply(changes)
        return changes

    def merge_changes(self, changes: Dict[str, Any], actor_id: str) -> Dict[str, Any]:
        """
        Merge a partial update over this entry and return the full patch,
        including recomputed hours when an hour input is part of it.
        Present keys win over stored values; an explicit None clears.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}",
                sorted(unknown)[0]
            )

        if "entry_time" in changes and changes["entry_time"] is None:
            raise ValidationError("Entry time is required", "entry_time")

        patch = dict(changes)
        if HOUR_INPUT_FIELDS & set(changes):
            entry_time = changes.get("entry_time", self.entry_time)
            exit_time = changes.get("exit_time", self.exit_time)
            extra_hours = changes.get("extra_hours", self.extra_hours)
            patch["regular_hours"], patch["total_hours"] = calculate_hours(
                entry_time, exit_time, extra_hours
            )

        patch["approved_by"] = actor_id
        self._apply(patch)
        return patch

    @staticmethod
    def status_change(
        status: TimeEntryStatus,
        actor_id: str,
        notes: Optional[str] = None,
        reason: Optional[str] = None,
        at: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Build the patch for a status transition.
        Any status may follow any other; the actor is always recorded as approver.
        """
        at = at or utcnow()
        patch: Dict[str, Any] = {"status": status, "approved_by": actor_id}
        if notes is not None:
            patch["notes"] = notes

        if status == TimeEntryStatus.APPROVED:
            patch["approved_at"] = at
        elif status == TimeEntryStatus.REJECTED:
            patch["rejected_by"] = actor_id
            patch["rejected_at"] = at
            if reason is not None:
                patch["rejected_reason"] = reason
        return patch

    def _apply(self, changes: Dict[str, Any]) -> None:
        for key, value in changes.items():
            setattr(self, key, value)
        self.mark_as_updated()


def parse_status(value: Any) -> TimeEntryStatus:
    """Parse a status literal, raising ValidationError on unknown values."""
    if isinstance(value, TimeEntryStatus):
        return value
    try:
        return TimeEntryStatus(str(value).lower())
    except ValueError:
        allowed = ", ".join(s.value for s in TimeEntryStatus)
        raise ValidationError(f"Invalid status {value!r}; expected one of: {allowed}", "status")
