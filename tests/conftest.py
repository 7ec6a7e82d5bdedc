"""
Shared fixtures: in-memory stand-ins for the time entry repository and
the employee directory.
"""

import asyncio
import copy
import re
import uuid
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

import pytest

from timeclock.domain.models.base import (
    EntityNotFoundError,
    ExitAlreadyRegisteredError,
    UniqueConstraintViolation,
    ValidationError,
    utcnow,
)
from timeclock.domain.models.employee import PersonSummary
from timeclock.domain.models.time_entry import TimeEntry
from timeclock.domain.repositories.employee_directory import EmployeeDirectory
from timeclock.domain.repositories.time_entry_repository import TimeEntryRepository
from timeclock.domain.services.clock import Clock, DayWindow


class InMemoryTimeEntryRepository(TimeEntryRepository):
    """Dict-backed repository enforcing one entry per employee and day."""

    def __init__(self):
        self.entries: Dict[str, TimeEntry] = {}
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def transaction(self):
        async with self._lock:
            snapshot = copy.deepcopy(self.entries)
            try:
                yield self
            except BaseException:
                self.entries = snapshot
                raise

    async def find_by_id(self, entry_id: str, for_update: bool = False) -> Optional[TimeEntry]:
        # Yield to the loop like a real driver would
        await asyncio.sleep(0)
        entry = self.entries.get(entry_id)
        return replace(entry) if entry else None

    async def find_for_employee_on_day(self, employee_id: str, window: DayWindow) -> Optional[TimeEntry]:
        for entry in self.entries.values():
            if entry.employee_id == employee_id and window.contains(entry.date):
                return replace(entry)
        return None

    async def find_many(
        self,
        employee_id: Optional[str] = None,
        window: Optional[DayWindow] = None
    ) -> List[TimeEntry]:
        entries = [
            entry for entry in self.entries.values()
            if (employee_id is None or entry.employee_id == employee_id)
            and (window is None or window.contains(entry.date))
        ]
        entries.sort(key=lambda entry: entry.entry_time)
        entries.sort(key=lambda entry: entry.date, reverse=True)
        return [replace(entry) for entry in entries]

    async def add(self, time_entry: TimeEntry) -> TimeEntry:
        for stored in self.entries.values():
            if stored.employee_id == time_entry.employee_id and stored.date == time_entry.date:
                raise UniqueConstraintViolation("employee_id, date")

        now = utcnow()
        stored = replace(time_entry, id=time_entry.id or str(uuid.uuid4()), created_at=now, updated_at=now)
        self.entries[stored.id] = stored
        return replace(stored)

    async def update(self, entry_id: str, changes: Dict[str, Any]) -> TimeEntry:
        stored = self.entries.get(entry_id)
        if stored is None:
            raise EntityNotFoundError("TimeEntry", entry_id)

        stored = replace(stored, **changes)
        stored.updated_at = utcnow()
        self.entries[entry_id] = stored
        return replace(stored)

    async def register_exit(self, entry_id: str, changes: Dict[str, Any]) -> TimeEntry:
        stored = self.entries.get(entry_id)
        if stored is None:
            raise EntityNotFoundError("TimeEntry", entry_id)
        if stored.exit_time is not None:
            raise ExitAlreadyRegisteredError(entry_id)
        return await self.update(entry_id, changes)

    async def delete(self, entry_id: str) -> bool:
        return self.entries.pop(entry_id, None) is not None


class InMemoryEmployeeDirectory(EmployeeDirectory):
    """Directory over fixed employee and user summaries."""

    KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

    def __init__(self, employees: Iterable[PersonSummary], users: Iterable[PersonSummary]):
        self.employees = {person.id: person for person in employees}
        self.users = {person.id: person for person in users}

    def canonical_key(self, raw: str) -> str:
        key = str(raw).strip() if raw is not None else ""
        if not self.KEY_PATTERN.match(key):
            raise ValidationError(f"Invalid employee reference: {raw!r}", "employee")
        return key

    async def employee_exists(self, employee_id: str) -> bool:
        return employee_id in self.employees

    async def summarize_employees(self, employee_ids):
        return {key: self.employees[key] for key in employee_ids if key in self.employees}

    async def summarize_users(self, user_ids):
        return {key: self.users[key] for key in user_ids if key in self.users}


@pytest.fixture
def repository() -> InMemoryTimeEntryRepository:
    return InMemoryTimeEntryRepository()


@pytest.fixture
def directory() -> InMemoryEmployeeDirectory:
    return InMemoryEmployeeDirectory(
        employees=[
            PersonSummary(id="E1", name="Elena Ruiz", email="elena@example.com"),
            PersonSummary(id="E2", name="Marco Diaz", email="marco@example.com"),
        ],
        users=[
            PersonSummary(id="U1", name="Ursula Admin", email="ursula@example.com"),
            PersonSummary(id="U2", name="Victor Reviewer", email="victor@example.com"),
        ],
    )


@pytest.fixture
def clock() -> Clock:
    return Clock("UTC")
