"""
Repository interfaces for the domain layer.
This module exports all repository interfaces (ports) for dependency injection.
"""

from .time_entry_repository import TimeEntryRepository
from .employee_directory import EmployeeDirectory

__all__ = [
    "TimeEntryRepository",
    "EmployeeDirectory",
]
