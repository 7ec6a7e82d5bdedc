"""
Application layer use cases.
Business logic for the attendance time clock.
"""

from .base_use_case import *
from .time_entry_use_cases import *

__all__ = [
    # Base Use Cases
    "BaseUseCase",
    "QueryUseCase",
    "CommandUseCase",
    "CreateUseCase",
    "UpdateUseCase",
    "DeleteUseCase",
    "ListUseCase",

    # Time entry use cases
    "TimeEntryProjection",
    "CreateTimeEntryUseCase",
    "RegisterExitUseCase",
    "UpdateTimeEntryStatusUseCase",
    "UpdateTimeEntryUseCase",
    "ListEmployeeTimeEntriesUseCase",
    "ListTimeEntriesByDateRangeUseCase",
    "DeleteTimeEntryUseCase",
]
