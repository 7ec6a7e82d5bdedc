"""
Time Entry use cases for the application layer.
Implements the attendance lifecycle: clock-in, clock-out, review, edits and queries.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from timeclock.application.use_cases.base_use_case import (
    CreateUseCase, UpdateUseCase, DeleteUseCase, ListUseCase
)
from timeclock.application.dto.time_entry_dto import (
    CreateTimeEntryRequestDTO, RegisterExitRequestDTO, UpdateTimeEntryStatusRequestDTO,
    UpdateTimeEntryRequestDTO, TimeEntryResponseDTO
)
from timeclock.domain.models.base import (
    DuplicateEntryError, EntityNotFoundError, UniqueConstraintViolation,
    UnresolvedReferenceError, ValidationError
)
from timeclock.domain.models.time_entry import TimeEntry, parse_status
from timeclock.domain.repositories.time_entry_repository import TimeEntryRepository
from timeclock.domain.repositories.employee_directory import EmployeeDirectory
from timeclock.domain.services.clock import Clock, coerce_number

logger = logging.getLogger(__name__)


NUMERIC_FIELDS = ("daily_rate", "extra_hours", "extra_hours_rate", "total")
INSTANT_FIELDS = ("entry_time", "exit_time")


class TimeEntryProjection:
    """Resolves employee and user references and builds response DTOs."""

    def __init__(self, employee_directory: EmployeeDirectory):
        self.employee_directory = employee_directory

    async def many(self, entries: Iterable[TimeEntry]) -> List[TimeEntryResponseDTO]:
        entries = list(entries)
        if not entries:
            return []

        employees = await self.employee_directory.summarize_employees(
            {entry.employee_id for entry in entries}
        )
        users = await self.employee_directory.summarize_users(
            {entry.approved_by for entry in entries} | {entry.rejected_by for entry in entries}
        )
        return [TimeEntryResponseDTO.from_domain(entry, employees, users) for entry in entries]

    async def one(self, entry: TimeEntry) -> TimeEntryResponseDTO:
        return (await self.many([entry]))[0]


class _TimeEntryUseCaseMixin:
    """Shared collaborators for time entry use cases."""

    def _setup(
        self,
        time_entry_repository: TimeEntryRepository,
        employee_directory: EmployeeDirectory,
        clock: Clock
    ) -> None:
        self.time_entry_repository = time_entry_repository
        self.employee_directory = employee_directory
        self.clock = clock
        self.projection = TimeEntryProjection(employee_directory)

    def _numbers(self, values: Dict[str, Any]) -> Dict[str, Optional[float]]:
        return {
            field: coerce_number(values[field], field)
            for field in NUMERIC_FIELDS
            if field in values
        }


class CreateTimeEntryUseCase(_TimeEntryUseCaseMixin, CreateUseCase[TimeEntryResponseDTO]):
    """Use case for creating a time entry (clock-in)."""

    def __init__(
        self,
        time_entry_repository: TimeEntryRepository,
        employee_directory: EmployeeDirectory,
        clock: Clock
    ):
        super().__init__()
        self._setup(time_entry_repository, employee_directory, clock)

    async def _execute_command_logic(
        self,
        request: CreateTimeEntryRequestDTO,
        acting_user_id: Optional[str] = None
    ) -> TimeEntryResponseDTO:
        day_start = self.clock.start_of_day(request.date, "date")
        entry_time = self.clock.parse_instant(request.entry_time, "entry_time")
        exit_time = None
        if request.exit_time is not None:
            exit_time = self.clock.parse_instant(request.exit_time, "exit_time")

        employee_id = self.employee_directory.canonical_key(request.employee)
        if not await self.employee_directory.employee_exists(employee_id):
            raise UnresolvedReferenceError("Employee", employee_id)

        day = self.clock.calendar_day(day_start)
        existing = await self.time_entry_repository.find_for_employee_on_day(
            employee_id, self.clock.day_window(day)
        )
        if existing is not None:
            raise DuplicateEntryError(employee_id, day)

        numbers = self._numbers(request.model_dump(include=set(NUMERIC_FIELDS)))
        time_entry = TimeEntry.create(
            employee_id=employee_id,
            date=day_start,
            entry_time=entry_time,
            exit_time=exit_time,
            status=parse_status(request.status) if request.status is not None else None,
            notes=request.notes,
            created_by=acting_user_id,
            **numbers
        )

        try:
            saved_entry = await self.time_entry_repository.add(time_entry)
        except UniqueConstraintViolation as exc:
            raise DuplicateEntryError(employee_id, day) from exc

        logger.info(f"Time entry {saved_entry.id} created for employee {employee_id} on {day}")
        return await self.projection.one(saved_entry)


class RegisterExitUseCase(_TimeEntryUseCaseMixin, UpdateUseCase[TimeEntryResponseDTO]):
    """
    Use case for registering the clock-out of an entry.
    The read-check-write runs in one repository transaction with the row
    locked, and the write itself only applies while no exit is stored, so
    two concurrent calls cannot both set the exit time.
    """

    def __init__(
        self,
        time_entry_repository: TimeEntryRepository,
        employee_directory: EmployeeDirectory,
        clock: Clock
    ):
        super().__init__()
        self._setup(time_entry_repository, employee_directory, clock)

    async def _execute_command_logic(
        self,
        entry_id: str,
        request: RegisterExitRequestDTO,
        acting_user_id: str
    ) -> TimeEntryResponseDTO:
        entry_id = self.time_entry_repository.canonical_id(entry_id)
        exit_time = self.clock.parse_instant(request.exit_time, "exit_time")

        async with self.time_entry_repository.transaction() as repository:
            time_entry = await repository.find_by_id(entry_id, for_update=True)
            if time_entry is None:
                raise EntityNotFoundError("TimeEntry", entry_id)

            changes = time_entry.register_exit(exit_time, acting_user_id)
            updated_entry = await repository.register_exit(entry_id, changes)

        logger.info(f"Exit registered for time entry {entry_id} by {acting_user_id}")
        return await self.projection.one(updated_entry)


class UpdateTimeEntryStatusUseCase(_TimeEntryUseCaseMixin, UpdateUseCase[TimeEntryResponseDTO]):
    """
    Use case for approving or rejecting a time entry.
    Any status may follow any other.
    """

    def __init__(
        self,
        time_entry_repository: TimeEntryRepository,
        employee_directory: EmployeeDirectory,
        clock: Clock
    ):
        super().__init__()
        self._setup(time_entry_repository, employee_directory, clock)

    async def _execute_command_logic(
        self,
        entry_id: str,
        request: UpdateTimeEntryStatusRequestDTO,
        acting_user_id: str
    ) -> TimeEntryResponseDTO:
        entry_id = self.time_entry_repository.canonical_id(entry_id)
        status = parse_status(request.status)

        changes = TimeEntry.status_change(
            status,
            acting_user_id,
            notes=request.notes,
            reason=request.reason,
            at=self.clock.now()
        )
        updated_entry = await self.time_entry_repository.update(entry_id, changes)

        logger.info(f"Time entry {entry_id} set to {status.value} by {acting_user_id}")
        return await self.projection.one(updated_entry)


class UpdateTimeEntryUseCase(_TimeEntryUseCaseMixin, UpdateUseCase[TimeEntryResponseDTO]):
    """
    Use case for general time entry edits.
    Hours are recomputed when entry time, exit time or extra hours change.
    """

    def __init__(
        self,
        time_entry_repository: TimeEntryRepository,
        employee_directory: EmployeeDirectory,
        clock: Clock
    ):
        super().__init__()
        self._setup(time_entry_repository, employee_directory, clock)

    async def _execute_command_logic(
        self,
        entry_id: str,
        request: UpdateTimeEntryRequestDTO,
        acting_user_id: str
    ) -> TimeEntryResponseDTO:
        entry_id = self.time_entry_repository.canonical_id(entry_id)
        changes = self._parse_changes(request.to_changes())

        time_entry = await self.time_entry_repository.find_by_id(entry_id)
        if time_entry is None:
            raise EntityNotFoundError("TimeEntry", entry_id)

        patch = time_entry.merge_changes(changes, acting_user_id)
        updated_entry = await self.time_entry_repository.update(entry_id, patch)

        logger.info(
            f"Time entry {entry_id} updated by {acting_user_id}: {', '.join(sorted(changes)) or 'no fields'}"
        )
        return await self.projection.one(updated_entry)

    def _parse_changes(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        for field in ("employee", "date"):
            if field in changes:
                raise ValidationError(f"{field} cannot be changed once the entry exists", field)

        parsed = dict(changes)
        for field in INSTANT_FIELDS:
            if parsed.get(field) is not None:
                parsed[field] = self.clock.parse_instant(parsed[field], field)

        if "status" in parsed:
            parsed["status"] = parse_status(parsed["status"])

        parsed.update(self._numbers(parsed))
        return parsed


class ListEmployeeTimeEntriesUseCase(_TimeEntryUseCaseMixin, ListUseCase[List[TimeEntryResponseDTO]]):
    """Use case for listing all entries of one employee."""

    def __init__(
        self,
        time_entry_repository: TimeEntryRepository,
        employee_directory: EmployeeDirectory,
        clock: Clock
    ):
        super().__init__()
        self._setup(time_entry_repository, employee_directory, clock)

    async def _execute_business_logic(self, employee_id: str) -> List[TimeEntryResponseDTO]:
        employee_id = self.employee_directory.canonical_key(employee_id)
        entries = await self.time_entry_repository.find_many(employee_id=employee_id)
        return await self.projection.many(entries)


class ListTimeEntriesByDateRangeUseCase(_TimeEntryUseCaseMixin, ListUseCase[List[TimeEntryResponseDTO]]):
    """
    Use case for listing entries whose day falls inside an inclusive
    calendar-day range, optionally for one employee.
    """

    def __init__(
        self,
        time_entry_repository: TimeEntryRepository,
        employee_directory: EmployeeDirectory,
        clock: Clock
    ):
        super().__init__()
        self._setup(time_entry_repository, employee_directory, clock)

    async def _execute_business_logic(
        self,
        start_date: Any,
        end_date: Any,
        employee_id: Optional[str] = None
    ) -> List[TimeEntryResponseDTO]:
        window = self.clock.range_window(start_date, end_date)
        if employee_id is not None:
            employee_id = self.employee_directory.canonical_key(employee_id)

        entries = await self.time_entry_repository.find_many(employee_id=employee_id, window=window)
        return await self.projection.many(entries)


class DeleteTimeEntryUseCase(DeleteUseCase[None]):
    """Use case for physically removing a time entry."""

    def __init__(self, time_entry_repository: TimeEntryRepository):
        super().__init__()
        self.time_entry_repository = time_entry_repository

    async def _execute_command_logic(self, entry_id: str) -> None:
        entry_id = self.time_entry_repository.canonical_id(entry_id)

        deleted = await self.time_entry_repository.delete(entry_id)
        if not deleted:
            raise EntityNotFoundError("TimeEntry", entry_id)

        logger.info(f"Time entry {entry_id} deleted")
