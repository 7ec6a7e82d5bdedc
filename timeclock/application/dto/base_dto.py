"""
Base DTOs for the application layer.
Provides common patterns for request/response data transfer objects.
"""

from typing import Any, Dict, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseDTO(BaseModel):
    """Base DTO with common configuration."""

    model_config = ConfigDict(
        # External names are camelCase, Python attributes snake_case
        alias_generator=to_camel,
        # Allow population by field name or alias
        populate_by_name=True,
        # Convert enum values to their values
        use_enum_values=True,
        # Validate assignment
        validate_assignment=True,
        extra="forbid",
    )

    def to_response(self) -> Dict[str, Any]:
        """JSON-ready dictionary using the external field names."""
        return self.model_dump(by_alias=True, mode="json")


class RequestDTO(BaseDTO):
    """Base class for request DTOs."""
    pass


class ResponseDTO(BaseDTO):
    """Base class for response DTOs."""

    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CreateRequestDTO(RequestDTO):
    """Base class for creation request DTOs."""
    pass


class UpdateRequestDTO(RequestDTO):
    """Base class for partial update request DTOs."""

    def to_changes(self) -> Dict[str, Any]:
        """
        Fields the caller actually sent, keyed by attribute name.
        An explicit null is kept so that it can clear the stored value.
        """
        return self.model_dump(exclude_unset=True)
