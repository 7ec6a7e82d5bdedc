"""
Base entity and domain exceptions.
This module contains the foundational classes for all domain entities.
"""

from datetime import datetime, timezone
from typing import Optional, Any
from abc import ABC
from dataclasses import dataclass, field


def utcnow() -> datetime:
    """Timezone-aware current UTC instant."""
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class BaseEntity(ABC):
    """
    Base class for all domain entities.
    Provides common attributes and behavior for all entities.
    """

    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __eq__(self, other: Any) -> bool:
        """Entities are equal if they have the same ID and are of the same type."""
        if not isinstance(other, self.__class__):
            return False
        if self.id is None or other.id is None:
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on entity ID."""
        if self.id is None:
            return hash(id(self))
        return hash((self.__class__.__name__, self.id))

    def mark_as_updated(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utcnow()

    @property
    def is_new(self) -> bool:
        """Check if entity is new (not persisted)."""
        return self.id is None

    def validate(self) -> None:
        """
        Validate the entity's state.
        Should be overridden by subclasses to implement specific validation rules.
        Raises ValidationError if the entity is in an invalid state.
        """
        pass


class DomainException(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(DomainException):
    """Exception raised when input or entity validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "INVALID_INPUT")
        self.field = field


class BusinessRuleViolation(DomainException):
    """Exception raised when a business rule is violated."""

    def __init__(self, message: str, code: str = "BUSINESS_RULE_VIOLATION"):
        super().__init__(message, code)


class EntityNotFoundError(DomainException):
    """Exception raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        message = f"{entity_type} with id {entity_id} not found"
        super().__init__(message, "NOT_FOUND")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateEntryError(DomainException):
    """Exception raised when an entry already exists for the same employee and day."""

    def __init__(self, employee_id: Any = None, day: Any = None):
        if employee_id is None:
            message = "A time entry already exists for this employee and day"
        else:
            message = f"A time entry already exists for employee {employee_id}"
            if day is not None:
                message = f"{message} on {day}"
        super().__init__(message, "DUPLICATE_ENTRY")
        self.employee_id = employee_id
        self.day = day


class ExitAlreadyRegisteredError(BusinessRuleViolation):
    """Exception raised when an exit time is registered twice."""

    def __init__(self, entry_id: Any):
        super().__init__(
            f"Exit time already registered for time entry {entry_id}",
            "EXIT_ALREADY_REGISTERED"
        )
        self.entry_id = entry_id


class UnresolvedReferenceError(DomainException):
    """Exception raised when a referenced employee or user cannot be resolved."""

    def __init__(self, reference_type: str, reference_id: Any):
        message = f"{reference_type} {reference_id} could not be resolved"
        super().__init__(message, "UNRESOLVED")
        self.reference_type = reference_type
        self.reference_id = reference_id


class RepositoryError(DomainException):
    """Exception raised when the storage layer fails for technical reasons."""

    def __init__(self, message: str = "Storage is unavailable"):
        super().__init__(message, "STORAGE_ERROR")


class UniqueConstraintViolation(RepositoryError):
    """Raised by repositories when a storage uniqueness constraint rejects a write."""

    def __init__(self, constraint: Optional[str] = None):
        message = "Unique constraint violated"
        if constraint:
            message = f"{message}: {constraint}"
        super().__init__(message)
        self.code = "UNIQUE_CONSTRAINT"
        self.constraint = constraint
