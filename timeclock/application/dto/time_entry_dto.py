"""
Time Entry DTOs for the application layer.
Data Transfer Objects for attendance operations.
"""

from typing import Optional, Dict, Union
from datetime import datetime, date
from pydantic import Field, field_validator

from timeclock.domain.models.employee import PersonSummary
from timeclock.domain.models.time_entry import TimeEntry, TimeEntryStatus
from .base_dto import (
    BaseDTO, RequestDTO, ResponseDTO, CreateRequestDTO, UpdateRequestDTO
)


# Raw instants are parsed by the clock in the reference timezone, not here
InstantInput = Union[datetime, date, str]
NumberInput = Union[float, str]


# Request DTOs
class CreateTimeEntryRequestDTO(CreateRequestDTO):
    """DTO for creating a time entry."""

    employee: str = Field(min_length=1, description="Employee reference")
    date: InstantInput = Field(description="Calendar day of the entry")
    entry_time: InstantInput = Field(description="Clock-in instant")
    exit_time: Optional[InstantInput] = Field(default=None, description="Clock-out instant")
    status: Optional[TimeEntryStatus] = Field(default=None, description="Initial status")
    notes: Optional[str] = Field(default=None, max_length=2000, description="Notes")

    daily_rate: Optional[NumberInput] = Field(default=None, description="Daily rate")
    extra_hours: Optional[NumberInput] = Field(default=None, description="Extra hours worked")
    extra_hours_rate: Optional[NumberInput] = Field(default=None, description="Rate for extra hours")
    total: Optional[NumberInput] = Field(default=None, description="Caller supplied total")

    @field_validator('employee')
    @classmethod
    def validate_employee(cls, v):
        """Employee reference must not be blank."""
        if not v.strip():
            raise ValueError('Employee is required')
        return v.strip()


class RegisterExitRequestDTO(RequestDTO):
    """DTO for registering the clock-out of an entry."""

    exit_time: InstantInput = Field(description="Clock-out instant")


class UpdateTimeEntryStatusRequestDTO(RequestDTO):
    """DTO for approving or rejecting a time entry."""

    status: TimeEntryStatus = Field(description="New status")
    notes: Optional[str] = Field(default=None, max_length=2000, description="Reviewer notes")
    reason: Optional[str] = Field(default=None, max_length=500, description="Rejection reason")


class UpdateTimeEntryRequestDTO(UpdateRequestDTO):
    """
    DTO for general time entry edits.
    Only the fields present in the payload are applied; employee and date
    are accepted here so the engine can refuse them explicitly.
    """

    employee: Optional[str] = None
    date: Optional[InstantInput] = None
    entry_time: Optional[InstantInput] = None
    exit_time: Optional[InstantInput] = None
    status: Optional[TimeEntryStatus] = None
    notes: Optional[str] = Field(default=None, max_length=2000)

    daily_rate: Optional[NumberInput] = None
    extra_hours: Optional[NumberInput] = None
    extra_hours_rate: Optional[NumberInput] = None
    total: Optional[NumberInput] = None


# Response DTOs
class PersonSummaryDTO(BaseDTO):
    """Employee or user reference as shown to clients."""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_domain(cls, summary: PersonSummary) -> "PersonSummaryDTO":
        return cls(id=summary.id, name=summary.name, email=summary.email)


class TimeEntryResponseDTO(ResponseDTO):
    """DTO for time entry responses."""

    employee: PersonSummaryDTO
    date: datetime
    entry_time: datetime
    exit_time: Optional[datetime] = None
    status: TimeEntryStatus
    notes: Optional[str] = None

    daily_rate: Optional[float] = None
    extra_hours: Optional[float] = None
    extra_hours_rate: Optional[float] = None
    total: Optional[float] = None
    regular_hours: Optional[float] = None
    total_hours: Optional[float] = None

    approved_by: Optional[PersonSummaryDTO] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[PersonSummaryDTO] = None
    rejected_at: Optional[datetime] = None
    rejected_reason: Optional[str] = None

    @classmethod
    def from_domain(
        cls,
        entry: TimeEntry,
        employees: Dict[str, PersonSummary],
        users: Dict[str, PersonSummary]
    ) -> "TimeEntryResponseDTO":
        """
        Project an entity with its references resolved.
        References missing from the lookups are shown with their id only.
        """
        return cls(
            id=entry.id,
            employee=_summary(entry.employee_id, employees),
            date=entry.date,
            entry_time=entry.entry_time,
            exit_time=entry.exit_time,
            status=entry.status,
            notes=entry.notes,
            daily_rate=entry.daily_rate,
            extra_hours=entry.extra_hours,
            extra_hours_rate=entry.extra_hours_rate,
            total=entry.total,
            regular_hours=entry.regular_hours,
            total_hours=entry.total_hours,
            approved_by=_summary(entry.approved_by, users),
            approved_at=entry.approved_at,
            rejected_by=_summary(entry.rejected_by, users),
            rejected_at=entry.rejected_at,
            rejected_reason=entry.rejected_reason,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )


def _summary(
    person_id: Optional[str],
    lookup: Dict[str, PersonSummary]
) -> Optional[PersonSummaryDTO]:
    if person_id is None:
        return None
    return PersonSummaryDTO.from_domain(lookup.get(person_id) or PersonSummary.unresolved(person_id))
