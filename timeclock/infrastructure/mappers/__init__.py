"""
Infrastructure mappers module.
Contains mappers for converting between domain entities and database models.
"""

from .time_entry_mapper import TimeEntryMapper

__all__ = [
    "TimeEntryMapper",
]
