"""
Repository implementations for the infrastructure layer.
"""

from .time_entry_repository import SQLAlchemyTimeEntryRepository
from .employee_directory import SQLAlchemyEmployeeDirectory

__all__ = [
    "SQLAlchemyTimeEntryRepository",
    "SQLAlchemyEmployeeDirectory",
]
