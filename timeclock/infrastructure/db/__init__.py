"""
Database infrastructure for the timeclock service.
"""

from .database import (
    Base,
    get_engine,
    get_session_factory,
    create_session_factory,
    get_db_session,
    create_all_tables,
    dispose_engine,
)
from .models import UserModel, EmployeeModel, TimeEntryModel

__all__ = [
    "Base",
    "get_engine",
    "get_session_factory",
    "create_session_factory",
    "get_db_session",
    "create_all_tables",
    "dispose_engine",
    "UserModel",
    "EmployeeModel",
    "TimeEntryModel",
]
