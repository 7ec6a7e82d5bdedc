"""
Employee and user references as seen by the time entry domain.
Employees and user accounts are owned by other services; the time entry
domain only needs their display summaries.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PersonSummary:
    """Display summary of an employee or a user account."""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def unresolved(cls, person_id: str) -> "PersonSummary":
        """Summary for a reference the directory no longer knows about."""
        return cls(id=person_id)
