"""
Domain models for the attendance time clock.
This module exports all domain entities and exceptions.
"""

# Base classes
from .base import (
    BaseEntity,
    DomainException,
    ValidationError,
    BusinessRuleViolation,
    EntityNotFoundError,
    DuplicateEntryError,
    ExitAlreadyRegisteredError,
    UnresolvedReferenceError,
    RepositoryError,
    UniqueConstraintViolation,
)

# Domain entities
from .employee import PersonSummary

from .time_entry import (
    TimeEntry,
    TimeEntryStatus,
    calculate_hours,
    diff_hours,
    round_hours,
    parse_status,
)

__all__ = [
    # Base classes
    "BaseEntity",
    "DomainException",
    "ValidationError",
    "BusinessRuleViolation",
    "EntityNotFoundError",
    "DuplicateEntryError",
    "ExitAlreadyRegisteredError",
    "UnresolvedReferenceError",
    "RepositoryError",
    "UniqueConstraintViolation",

    # People
    "PersonSummary",

    # TimeEntry
    "TimeEntry",
    "TimeEntryStatus",
    "calculate_hours",
    "diff_hours",
    "round_hours",
    "parse_status",
]
