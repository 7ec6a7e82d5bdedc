"""
Application layer DTOs.
Data Transfer Objects for API requests and responses.
"""

from .base_dto import *
from .time_entry_dto import *

__all__ = [
    # Base DTOs
    "BaseDTO",
    "RequestDTO",
    "ResponseDTO",
    "CreateRequestDTO",
    "UpdateRequestDTO",

    # Time entry DTOs
    "CreateTimeEntryRequestDTO",
    "RegisterExitRequestDTO",
    "UpdateTimeEntryStatusRequestDTO",
    "UpdateTimeEntryRequestDTO",
    "PersonSummaryDTO",
    "TimeEntryResponseDTO",
]
