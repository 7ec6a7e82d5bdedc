"""
Time entries router.
Handles clock-in, clock-out, review, edits and attendance queries.
Domain errors are translated to HTTP responses by the application's
exception handlers.
"""

from functools import lru_cache
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.config import settings
from timeclock.infrastructure.auth import get_current_user_id
from timeclock.application.use_cases.time_entry_use_cases import (
    CreateTimeEntryUseCase,
    RegisterExitUseCase,
    UpdateTimeEntryStatusUseCase,
    UpdateTimeEntryUseCase,
    ListEmployeeTimeEntriesUseCase,
    ListTimeEntriesByDateRangeUseCase,
    DeleteTimeEntryUseCase
)
from timeclock.application.dto.time_entry_dto import (
    CreateTimeEntryRequestDTO,
    RegisterExitRequestDTO,
    UpdateTimeEntryStatusRequestDTO,
    UpdateTimeEntryRequestDTO,
    TimeEntryResponseDTO
)
from timeclock.domain.repositories.time_entry_repository import TimeEntryRepository
from timeclock.domain.repositories.employee_directory import EmployeeDirectory
from timeclock.domain.services.clock import Clock
from timeclock.infrastructure.db.database import get_db_session
from timeclock.infrastructure.repositories.time_entry_repository import SQLAlchemyTimeEntryRepository
from timeclock.infrastructure.repositories.employee_directory import SQLAlchemyEmployeeDirectory


router = APIRouter()

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def get_time_entry_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> TimeEntryRepository:
    """Dependency to get time entry repository."""
    return SQLAlchemyTimeEntryRepository(session)


def get_employee_directory(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> EmployeeDirectory:
    """Dependency to get the employee directory."""
    return SQLAlchemyEmployeeDirectory(session)


@lru_cache()
def get_clock() -> Clock:
    """Dependency to get the clock bound to the configured timezone."""
    return Clock(settings.timezone)


Repository = Annotated[TimeEntryRepository, Depends(get_time_entry_repository)]
Directory = Annotated[EmployeeDirectory, Depends(get_employee_directory)]
ClockDep = Annotated[Clock, Depends(get_clock)]
UserId = Annotated[str, Depends(get_current_user_id)]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=TimeEntryResponseDTO)
async def create_time_entry(
    request: CreateTimeEntryRequestDTO,
    user_id: UserId,
    repository: Repository,
    directory: Directory,
    clock: ClockDep
):
    """
    Create a time entry (clock-in).

    - **employee**: Employee reference
    - **date**: Calendar day of the entry
    - **entryTime**: Clock-in instant (ISO 8601)
    - **exitTime**: Clock-out instant, optional
    - **dailyRate**, **extraHours**, **extraHoursRate**, **total**: optional figures
    """
    use_case = CreateTimeEntryUseCase(repository, directory, clock)
    return await use_case.execute(request, user_id)


@router.get("/employee/{employee_id}", response_model=List[TimeEntryResponseDTO])
async def list_employee_time_entries(
    employee_id: str,
    user_id: UserId,
    repository: Repository,
    directory: Directory,
    clock: ClockDep
):
    """
    List all time entries of an employee, newest day first.
    """
    use_case = ListEmployeeTimeEntriesUseCase(repository, directory, clock)
    return await use_case.execute(employee_id)


@router.get("", response_model=List[TimeEntryResponseDTO])
async def list_time_entries_by_date_range(
    user_id: UserId,
    repository: Repository,
    directory: Directory,
    clock: ClockDep,
    start_date: str = Query(alias="startDate", pattern=DATE_PATTERN, description="First day (YYYY-MM-DD)"),
    end_date: str = Query(alias="endDate", pattern=DATE_PATTERN, description="Last day (YYYY-MM-DD), inclusive"),
    employee_id: Optional[str] = Query(None, alias="employeeId", description="Filter by employee")
):
    """
    List time entries whose day falls between startDate and endDate.
    """
    use_case = ListTimeEntriesByDateRangeUseCase(repository, directory, clock)
    return await use_case.execute(start_date, end_date, employee_id)


@router.post("/{time_entry_id}/exit", response_model=TimeEntryResponseDTO)
async def register_exit(
    time_entry_id: str,
    request: RegisterExitRequestDTO,
    user_id: UserId,
    repository: Repository,
    directory: Directory,
    clock: ClockDep
):
    """
    Register the clock-out of an entry. Fails if it is already registered.
    """
    use_case = RegisterExitUseCase(repository, directory, clock)
    return await use_case.execute(time_entry_id, request, user_id)


@router.post("/{time_entry_id}/status", response_model=TimeEntryResponseDTO)
async def update_time_entry_status(
    time_entry_id: str,
    request: UpdateTimeEntryStatusRequestDTO,
    user_id: UserId,
    repository: Repository,
    directory: Directory,
    clock: ClockDep
):
    """
    Approve, reject or reset an entry to pending.

    - **status**: pending, approved or rejected
    - **notes**: reviewer notes, optional
    - **reason**: rejection reason, optional
    """
    use_case = UpdateTimeEntryStatusUseCase(repository, directory, clock)
    return await use_case.execute(time_entry_id, request, user_id)


@router.patch("/{time_entry_id}", response_model=TimeEntryResponseDTO)
async def update_time_entry(
    time_entry_id: str,
    request: UpdateTimeEntryRequestDTO,
    user_id: UserId,
    repository: Repository,
    directory: Directory,
    clock: ClockDep
):
    """
    Edit an entry. Only the fields sent are changed; sending null clears a field.
    """
    use_case = UpdateTimeEntryUseCase(repository, directory, clock)
    return await use_case.execute(time_entry_id, request, user_id)


@router.delete("/{time_entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_time_entry(
    time_entry_id: str,
    user_id: UserId,
    repository: Repository
):
    """
    Permanently delete a time entry.
    """
    use_case = DeleteTimeEntryUseCase(repository)
    await use_case.execute(time_entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
