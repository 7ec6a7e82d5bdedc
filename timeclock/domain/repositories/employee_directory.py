"""Employee directory interface.
Resolves employee and user references owned by other services.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

from timeclock.domain.models.employee import PersonSummary


class EmployeeDirectory(ABC):
    """
    Lookup port for employees and user accounts.
    """

    @abstractmethod
    def canonical_key(self, raw: str) -> str:
        """
        Normalize a raw employee or user reference into the storage key.
        Raises ValidationError for malformed references.
        """
        pass

    @abstractmethod
    async def employee_exists(self, employee_id: str) -> bool:
        """Check whether the employee is known."""
        pass

    @abstractmethod
    async def summarize_employees(self, employee_ids: Iterable[str]) -> Dict[str, PersonSummary]:
        """
        Batch lookup of employee summaries.
        Unknown ids are absent from the result.
        """
        pass

    @abstractmethod
    async def summarize_users(self, user_ids: Iterable[Optional[str]]) -> Dict[str, PersonSummary]:
        """
        Batch lookup of user summaries. None ids are ignored.
        Unknown ids are absent from the result.
        """
        pass
