"""Time Entry repository interface.
Defines the contract for time entry data persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Dict, Any, AsyncContextManager

from timeclock.domain.models.base import ValidationError
from timeclock.domain.models.time_entry import TimeEntry
from timeclock.domain.services.clock import DayWindow


class TimeEntryRepository(ABC):
    """
    Repository interface for TimeEntry entity.
    Storage enforces at most one entry per (employee, calendar day) and
    reports violations as UniqueConstraintViolation.
    """

    def canonical_id(self, raw: Any) -> str:
        """
        Normalize a raw record id.
        Raises ValidationError for ids storage could never hold.
        """
        entry_id = str(raw).strip() if raw is not None else ""
        if not entry_id:
            raise ValidationError("Time entry id is required", "id")
        return entry_id

    @abstractmethod
    async def find_by_id(self, entry_id: str, for_update: bool = False) -> Optional[TimeEntry]:
        """
        Find a time entry by its ID.
        With for_update the row stays locked until the surrounding transaction ends.
        Returns None if not found.
        """
        pass

    @abstractmethod
    async def find_for_employee_on_day(
        self,
        employee_id: str,
        window: DayWindow
    ) -> Optional[TimeEntry]:
        """
        Find the employee's entry whose date falls inside the day window.
        """
        pass

    @abstractmethod
    async def find_many(
        self,
        employee_id: Optional[str] = None,
        window: Optional[DayWindow] = None
    ) -> List[TimeEntry]:
        """
        Find entries, optionally filtered by employee and date window.
        Ordered by date descending, then entry time ascending.
        """
        pass

    @abstractmethod
    async def add(self, time_entry: TimeEntry) -> TimeEntry:
        """
        Persist a new time entry.
        Returns the stored entry with its id and timestamps assigned.
        """
        pass

    @abstractmethod
    async def update(self, entry_id: str, changes: Dict[str, Any]) -> TimeEntry:
        """
        Apply a partial update and return the stored entry.
        Raises EntityNotFoundError if the entry does not exist.
        """
        pass

    @abstractmethod
    async def delete(self, entry_id: str) -> bool:
        """
        Delete a time entry by ID.
        Returns True if deleted, False if not found.
        """
        pass

    @abstractmethod
    async def register_exit(self, entry_id: str, changes: Dict[str, Any]) -> TimeEntry:
        """
        Write the exit fields only if the stored entry has no exit time yet.
        Raises EntityNotFoundError if the entry does not exist and
        ExitAlreadyRegisteredError if another writer set the exit first.
        """
        pass

    @abstractmethod
    def transaction(self) -> AsyncContextManager["TimeEntryRepository"]:
        """
        Run the enclosed reads and writes as one unit of work.
        Yields the repository bound to that transaction; everything is
        rolled back if the block raises.
        """
        pass
