"""
Unit tests for time entry use cases.
"""

import asyncio
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock

from timeclock.application.dto.time_entry_dto import (
    CreateTimeEntryRequestDTO,
    RegisterExitRequestDTO,
    UpdateTimeEntryStatusRequestDTO,
    UpdateTimeEntryRequestDTO,
)
from timeclock.application.use_cases.time_entry_use_cases import (
    CreateTimeEntryUseCase,
    RegisterExitUseCase,
    UpdateTimeEntryStatusUseCase,
    UpdateTimeEntryUseCase,
    ListEmployeeTimeEntriesUseCase,
    ListTimeEntriesByDateRangeUseCase,
    DeleteTimeEntryUseCase,
)
from timeclock.domain.models.base import (
    DuplicateEntryError,
    EntityNotFoundError,
    ExitAlreadyRegisteredError,
    UnresolvedReferenceError,
    ValidationError,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


async def create_entry(repository, directory, clock, actor="U1", **fields):
    payload = {
        "employee": "E1",
        "date": "2025-11-03",
        "entry_time": "2025-11-03T08:00:00Z",
    }
    payload.update(fields)
    use_case = CreateTimeEntryUseCase(repository, directory, clock)
    return await use_case.execute(CreateTimeEntryRequestDTO(**payload), actor)


class TestCreateTimeEntryUseCase:
    """Test cases for creating time entries."""

    @pytest.mark.asyncio
    async def test_create_pending_entry_without_exit(self, repository, directory, clock):
        """Test a clock-in without exit leaves the hours empty."""
        entry = await create_entry(repository, directory, clock)

        assert entry.id is not None
        assert entry.status == "pending"
        assert entry.date == utc(2025, 11, 3)
        assert entry.entry_time == utc(2025, 11, 3, 8)
        assert entry.exit_time is None
        assert entry.regular_hours is None
        assert entry.total_hours is None
        assert entry.employee.id == "E1"
        assert entry.employee.name == "Elena Ruiz"
        assert entry.approved_by.id == "U1"

    @pytest.mark.asyncio
    async def test_create_with_exit_computes_hours(self, repository, directory, clock):
        """Test hours for 08:00 to 17:30 with one extra hour."""
        entry = await create_entry(
            repository, directory, clock,
            exit_time="2025-11-03T17:30:00Z",
            extra_hours=1
        )

        assert entry.regular_hours == 9.5
        assert entry.total_hours == 10.5

    @pytest.mark.asyncio
    async def test_create_without_actor(self, repository, directory, clock):
        """Test that an anonymous creation leaves approver empty."""
        entry = await create_entry(repository, directory, clock, actor=None)

        assert entry.approved_by is None

    @pytest.mark.asyncio
    async def test_create_keeps_requested_status(self, repository, directory, clock):
        """Test an explicit initial status is kept."""
        entry = await create_entry(repository, directory, clock, status="approved")

        assert entry.status == "approved"

    @pytest.mark.asyncio
    async def test_create_coerces_numeric_strings(self, repository, directory, clock):
        """Test numeric fields given as strings are stored as numbers."""
        entry = await create_entry(
            repository, directory, clock,
            daily_rate="120.50",
            extra_hours_rate="15",
            total=0
        )

        assert entry.daily_rate == 120.5
        assert entry.extra_hours_rate == 15.0
        assert entry.total == 0.0

    @pytest.mark.asyncio
    async def test_create_rejects_non_numeric_value(self, repository, directory, clock):
        """Test non-numeric figures are invalid input."""
        with pytest.raises(ValidationError):
            await create_entry(repository, directory, clock, daily_rate="a lot")

        assert repository.entries == {}

    @pytest.mark.asyncio
    async def test_same_day_is_duplicate_next_day_is_not(self, repository, directory, clock):
        """Test one entry per employee per calendar day."""
        await create_entry(repository, directory, clock)

        with pytest.raises(DuplicateEntryError) as exc_info:
            await create_entry(
                repository, directory, clock,
                date="2025-11-03T15:00:00Z",
                entry_time="2025-11-03T15:00:00Z"
            )
        assert exc_info.value.code == "DUPLICATE_ENTRY"

        next_day = await create_entry(
            repository, directory, clock,
            date="2025-11-04",
            entry_time="2025-11-04T08:00:00Z"
        )
        assert next_day.date == utc(2025, 11, 4)

    @pytest.mark.asyncio
    async def test_other_employee_same_day_allowed(self, repository, directory, clock):
        """Test uniqueness is per employee."""
        await create_entry(repository, directory, clock)
        other = await create_entry(repository, directory, clock, employee="E2")

        assert other.employee.id == "E2"

    @pytest.mark.asyncio
    async def test_storage_constraint_maps_to_duplicate(self, repository, directory, clock):
        """Test a write rejected by storage after the pre-check passed."""
        await create_entry(repository, directory, clock)
        repository.find_for_employee_on_day = AsyncMock(return_value=None)

        with pytest.raises(DuplicateEntryError):
            await create_entry(repository, directory, clock, entry_time="2025-11-03T09:00:00Z")

        assert len(repository.entries) == 1

    @pytest.mark.asyncio
    async def test_unknown_employee_is_unresolved(self, repository, directory, clock):
        """Test an employee the directory does not know."""
        with pytest.raises(UnresolvedReferenceError):
            await create_entry(repository, directory, clock, employee="E404")

    @pytest.mark.asyncio
    async def test_malformed_employee_is_invalid(self, repository, directory, clock):
        """Test a malformed employee reference."""
        with pytest.raises(ValidationError):
            await create_entry(repository, directory, clock, employee="E 1")

    @pytest.mark.asyncio
    async def test_unparseable_instant_is_invalid(self, repository, directory, clock):
        """Test date parsing failures."""
        with pytest.raises(ValidationError) as exc_info:
            await create_entry(repository, directory, clock, entry_time="yesterday-ish")

        assert exc_info.value.field == "entry_time"

    @pytest.mark.asyncio
    async def test_exit_before_entry_is_invalid(self, repository, directory, clock):
        """Test exit time earlier than entry time."""
        with pytest.raises(ValidationError):
            await create_entry(repository, directory, clock, exit_time="2025-11-03T07:00:00Z")


class TestRegisterExitUseCase:
    """Test cases for registering exits."""

    @pytest.mark.asyncio
    async def test_scenario_create_then_register_exit(self, repository, directory, clock):
        """Test a full clock-in and clock-out day."""
        created = await create_entry(repository, directory, clock)
        assert created.status == "pending"
        assert created.regular_hours is None

        use_case = RegisterExitUseCase(repository, directory, clock)
        entry = await use_case.execute(
            created.id,
            RegisterExitRequestDTO(exit_time="2025-11-03T17:00:00Z"),
            "U1"
        )

        assert entry.exit_time == utc(2025, 11, 3, 17)
        assert entry.regular_hours == 9.0
        assert entry.total_hours == 9.0
        assert entry.approved_by.id == "U1"
        assert entry.approved_by.name == "Ursula Admin"

    @pytest.mark.asyncio
    async def test_uses_stored_extra_hours(self, repository, directory, clock):
        """Test total hours include extra hours recorded at creation."""
        created = await create_entry(repository, directory, clock, extra_hours=1.5)

        entry = await RegisterExitUseCase(repository, directory, clock).execute(
            created.id, RegisterExitRequestDTO(exit_time="2025-11-03T16:00:00Z"), "U2"
        )

        assert entry.regular_hours == 8.0
        assert entry.total_hours == 9.5
        assert entry.approved_by.id == "U2"

    @pytest.mark.asyncio
    async def test_second_exit_fails_and_keeps_first(self, repository, directory, clock):
        """Test exit time can only be registered once."""
        created = await create_entry(repository, directory, clock)
        use_case = RegisterExitUseCase(repository, directory, clock)
        await use_case.execute(created.id, RegisterExitRequestDTO(exit_time="2025-11-03T17:00:00Z"), "U1")

        with pytest.raises(ExitAlreadyRegisteredError):
            await use_case.execute(created.id, RegisterExitRequestDTO(exit_time="2025-11-03T18:00:00Z"), "U2")

        stored = await repository.find_by_id(created.id)
        assert stored.exit_time == utc(2025, 11, 3, 17)
        assert stored.approved_by == "U1"

    @pytest.mark.asyncio
    async def test_concurrent_exits_only_one_wins(self, repository, directory, clock):
        """Test two simultaneous exits for the same entry."""
        created = await create_entry(repository, directory, clock)
        use_case = RegisterExitUseCase(repository, directory, clock)

        results = await asyncio.gather(
            use_case.execute(created.id, RegisterExitRequestDTO(exit_time="2025-11-03T17:00:00Z"), "U1"),
            use_case.execute(created.id, RegisterExitRequestDTO(exit_time="2025-11-03T18:00:00Z"), "U2"),
            return_exceptions=True
        )

        failures = [r for r in results if isinstance(r, Exception)]
        successes = [r for r in results if not isinstance(r, Exception)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert isinstance(failures[0], ExitAlreadyRegisteredError)

        stored = await repository.find_by_id(created.id)
        assert stored.exit_time == successes[0].exit_time

    @pytest.mark.asyncio
    async def test_missing_entry_is_not_found(self, repository, directory, clock):
        """Test registering an exit on an unknown id."""
        with pytest.raises(EntityNotFoundError):
            await RegisterExitUseCase(repository, directory, clock).execute(
                "missing", RegisterExitRequestDTO(exit_time="2025-11-03T17:00:00Z"), "U1"
            )

    @pytest.mark.asyncio
    async def test_exit_before_entry_rolls_back(self, repository, directory, clock):
        """Test a failing exit leaves the entry untouched."""
        created = await create_entry(repository, directory, clock)

        with pytest.raises(ValidationError):
            await RegisterExitUseCase(repository, directory, clock).execute(
                created.id, RegisterExitRequestDTO(exit_time="2025-11-03T06:00:00Z"), "U2"
            )

        stored = await repository.find_by_id(created.id)
        assert stored.exit_time is None
        assert stored.approved_by == "U1"


class TestUpdateTimeEntryStatusUseCase:
    """Test cases for status changes."""

    @pytest.mark.asyncio
    async def test_approve_stamps_approval(self, repository, directory, clock):
        """Test approving an entry."""
        created = await create_entry(repository, directory, clock)

        entry = await UpdateTimeEntryStatusUseCase(repository, directory, clock).execute(
            created.id,
            UpdateTimeEntryStatusRequestDTO(status="approved", notes="Looks right"),
            "U2"
        )

        assert entry.status == "approved"
        assert entry.notes == "Looks right"
        assert entry.approved_by.id == "U2"
        assert entry.approved_at is not None
        assert entry.rejected_by is None

    @pytest.mark.asyncio
    async def test_reject_records_reason(self, repository, directory, clock):
        """Test rejecting an entry with a reason."""
        created = await create_entry(repository, directory, clock, notes="Original")

        entry = await UpdateTimeEntryStatusUseCase(repository, directory, clock).execute(
            created.id,
            UpdateTimeEntryStatusRequestDTO(status="rejected", reason="Missing badge scan"),
            "U2"
        )

        assert entry.status == "rejected"
        assert entry.notes == "Original"
        assert entry.rejected_by.id == "U2"
        assert entry.rejected_at is not None
        assert entry.rejected_reason == "Missing badge scan"
        assert entry.approved_by.id == "U2"

    @pytest.mark.asyncio
    async def test_any_status_can_follow_any_other(self, repository, directory, clock):
        """Test rejected entries can go back to pending and then be approved."""
        created = await create_entry(repository, directory, clock)
        use_case = UpdateTimeEntryStatusUseCase(repository, directory, clock)

        await use_case.execute(created.id, UpdateTimeEntryStatusRequestDTO(status="rejected", reason="Late"), "U2")
        pending = await use_case.execute(created.id, UpdateTimeEntryStatusRequestDTO(status="pending"), "U1")
        assert pending.status == "pending"
        assert pending.rejected_reason == "Late"

        approved = await use_case.execute(created.id, UpdateTimeEntryStatusRequestDTO(status="approved"), "U1")
        assert approved.status == "approved"

    @pytest.mark.asyncio
    async def test_missing_entry_is_not_found(self, repository, directory, clock):
        """Test changing status of an unknown id."""
        with pytest.raises(EntityNotFoundError):
            await UpdateTimeEntryStatusUseCase(repository, directory, clock).execute(
                "missing", UpdateTimeEntryStatusRequestDTO(status="approved"), "U1"
            )


class TestUpdateTimeEntryUseCase:
    """Test cases for general edits."""

    async def _closed_entry(self, repository, directory, clock):
        return await create_entry(
            repository, directory, clock,
            exit_time="2025-11-03T17:30:00Z",
            extra_hours=1
        )

    @pytest.mark.asyncio
    async def test_clearing_exit_clears_hours(self, repository, directory, clock):
        """Test removing the exit time clears both derived fields."""
        created = await self._closed_entry(repository, directory, clock)
        assert created.regular_hours == 9.5

        entry = await UpdateTimeEntryUseCase(repository, directory, clock).execute(
            created.id, UpdateTimeEntryRequestDTO(exit_time=None), "U2"
        )

        assert entry.exit_time is None
        assert entry.regular_hours is None
        assert entry.total_hours is None
        assert entry.approved_by.id == "U2"

    @pytest.mark.asyncio
    async def test_changing_extra_hours_recomputes_total(self, repository, directory, clock):
        """Test extra hours changes recompute the total."""
        created = await self._closed_entry(repository, directory, clock)

        entry = await UpdateTimeEntryUseCase(repository, directory, clock).execute(
            created.id, UpdateTimeEntryRequestDTO(extra_hours="2.25"), "U1"
        )

        assert entry.extra_hours == 2.25
        assert entry.regular_hours == 9.5
        assert entry.total_hours == 11.75

    @pytest.mark.asyncio
    async def test_changing_entry_time_recomputes_hours(self, repository, directory, clock):
        """Test moving the clock-in recomputes hours from the stored exit."""
        created = await self._closed_entry(repository, directory, clock)

        entry = await UpdateTimeEntryUseCase(repository, directory, clock).execute(
            created.id, UpdateTimeEntryRequestDTO(entry_time="2025-11-03T09:30:00Z"), "U1"
        )

        assert entry.regular_hours == 8.0
        assert entry.total_hours == 9.0

    @pytest.mark.asyncio
    async def test_notes_only_keeps_hours(self, repository, directory, clock):
        """Test edits that do not touch hour inputs."""
        created = await self._closed_entry(repository, directory, clock)

        entry = await UpdateTimeEntryUseCase(repository, directory, clock).execute(
            created.id, UpdateTimeEntryRequestDTO(notes="Forgot badge"), "U2"
        )

        assert entry.notes == "Forgot badge"
        assert entry.regular_hours == 9.5
        assert entry.approved_by.id == "U2"

    @pytest.mark.asyncio
    async def test_employee_cannot_change(self, repository, directory, clock):
        """Test employee is immutable."""
        created = await create_entry(repository, directory, clock)

        with pytest.raises(ValidationError):
            await UpdateTimeEntryUseCase(repository, directory, clock).execute(
                created.id, UpdateTimeEntryRequestDTO(employee="E2"), "U1"
            )

    @pytest.mark.asyncio
    async def test_entry_time_cannot_be_cleared(self, repository, directory, clock):
        """Test entry time stays required."""
        created = await create_entry(repository, directory, clock)

        with pytest.raises(ValidationError):
            await UpdateTimeEntryUseCase(repository, directory, clock).execute(
                created.id, UpdateTimeEntryRequestDTO(entry_time=None), "U1"
            )

    @pytest.mark.asyncio
    async def test_unparseable_exit_is_invalid(self, repository, directory, clock):
        """Test date parsing on update."""
        created = await create_entry(repository, directory, clock)

        with pytest.raises(ValidationError):
            await UpdateTimeEntryUseCase(repository, directory, clock).execute(
                created.id, UpdateTimeEntryRequestDTO(exit_time="17h"), "U1"
            )

    @pytest.mark.asyncio
    async def test_missing_entry_is_not_found(self, repository, directory, clock):
        """Test updating an unknown id."""
        with pytest.raises(EntityNotFoundError):
            await UpdateTimeEntryUseCase(repository, directory, clock).execute(
                "missing", UpdateTimeEntryRequestDTO(notes="x"), "U1"
            )


class TestTimeEntryQueries:
    """Test cases for listing time entries."""

    async def _seed(self, repository, directory, clock):
        await create_entry(repository, directory, clock, employee="E1", entry_time="2025-11-03T09:00:00Z")
        await create_entry(repository, directory, clock, employee="E2", entry_time="2025-11-03T08:00:00Z")
        await create_entry(
            repository, directory, clock,
            employee="E1", date="2025-11-04", entry_time="2025-11-04T07:45:00Z"
        )
        await create_entry(
            repository, directory, clock,
            employee="E2", date="2025-11-10", entry_time="2025-11-10T08:00:00Z"
        )

    @pytest.mark.asyncio
    async def test_range_is_ordered_by_day_then_entry_time(self, repository, directory, clock):
        """Test date descending then entry time ascending."""
        await self._seed(repository, directory, clock)

        entries = await ListTimeEntriesByDateRangeUseCase(repository, directory, clock).execute(
            "2025-11-01", "2025-11-05"
        )

        assert [(e.employee.id, e.entry_time) for e in entries] == [
            ("E1", utc(2025, 11, 4, 7, 45)),
            ("E2", utc(2025, 11, 3, 8)),
            ("E1", utc(2025, 11, 3, 9)),
        ]

    @pytest.mark.asyncio
    async def test_range_includes_whole_end_day(self, repository, directory, clock):
        """Test the end date is inclusive."""
        await self._seed(repository, directory, clock)

        entries = await ListTimeEntriesByDateRangeUseCase(repository, directory, clock).execute(
            "2025-11-10", "2025-11-10"
        )

        assert len(entries) == 1
        assert entries[0].employee.id == "E2"

    @pytest.mark.asyncio
    async def test_range_filtered_by_employee(self, repository, directory, clock):
        """Test the optional employee filter."""
        await self._seed(repository, directory, clock)

        entries = await ListTimeEntriesByDateRangeUseCase(repository, directory, clock).execute(
            "2025-11-01", "2025-11-30", employee_id="E2"
        )

        assert [e.date for e in entries] == [utc(2025, 11, 10), utc(2025, 11, 3)]

    @pytest.mark.asyncio
    async def test_range_start_after_end_is_invalid(self, repository, directory, clock):
        """Test reversed ranges."""
        with pytest.raises(ValidationError):
            await ListTimeEntriesByDateRangeUseCase(repository, directory, clock).execute(
                "2025-11-05", "2025-11-01"
            )

    @pytest.mark.asyncio
    async def test_list_by_employee(self, repository, directory, clock):
        """Test listing one employee's entries."""
        await self._seed(repository, directory, clock)

        entries = await ListEmployeeTimeEntriesUseCase(repository, directory, clock).execute("E1")

        assert [e.date for e in entries] == [utc(2025, 11, 4), utc(2025, 11, 3)]

    @pytest.mark.asyncio
    async def test_list_by_unknown_employee_is_empty(self, repository, directory, clock):
        """Test an employee without entries."""
        entries = await ListEmployeeTimeEntriesUseCase(repository, directory, clock).execute("E9")

        assert entries == []

    @pytest.mark.asyncio
    async def test_unknown_approver_is_shown_by_id(self, repository, directory, clock):
        """Test references the directory cannot resolve."""
        await create_entry(repository, directory, clock, actor="ghost")

        entries = await ListEmployeeTimeEntriesUseCase(repository, directory, clock).execute("E1")

        assert entries[0].approved_by.id == "ghost"
        assert entries[0].approved_by.name is None


class TestDeleteTimeEntryUseCase:
    """Test cases for removing time entries."""

    @pytest.mark.asyncio
    async def test_delete_twice_fails_the_second_time(self, repository, directory, clock):
        """Test removal never succeeds twice."""
        created = await create_entry(repository, directory, clock)
        use_case = DeleteTimeEntryUseCase(repository)

        await use_case.execute(created.id)
        assert await repository.find_by_id(created.id) is None

        with pytest.raises(EntityNotFoundError):
            await use_case.execute(created.id)

    @pytest.mark.asyncio
    async def test_delete_frees_the_day(self, repository, directory, clock):
        """Test a removed day can be recorded again."""
        created = await create_entry(repository, directory, clock)
        await DeleteTimeEntryUseCase(repository).execute(created.id)

        again = await create_entry(repository, directory, clock)
        assert again.id != created.id
