"""
SQLAlchemy models for the database.
Maps domain entities to database tables.
"""

import uuid

from sqlalchemy import (
    Column, String, DateTime, Text, Boolean, Float,
    Numeric, ForeignKey, Enum as SQLEnum, Uuid,
    Index, UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship

from timeclock.domain.models.base import utcnow
from timeclock.domain.models.time_entry import TimeEntryStatus
from timeclock.infrastructure.db.database import Base


def new_id() -> str:
    return str(uuid.uuid4())


class UserModel(Base):
    """User accounts, owned by the authentication service."""
    __tablename__ = 'users'

    id = Column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    name = Column(String(255))
    username = Column(String(100), unique=True)
    email = Column(String(255), unique=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    employee = relationship("EmployeeModel", back_populates="user", uselist=False)


class EmployeeModel(Base):
    """Employees, owned by the staff management service."""
    __tablename__ = 'employees'

    id = Column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255))
    is_active = Column(Boolean, default=True, nullable=False)
    user_id = Column(Uuid(as_uuid=False), ForeignKey('users.id'))

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("UserModel", back_populates="employee")
    time_entries = relationship("TimeEntryModel", back_populates="employee")


class TimeEntryModel(Base):
    """Time entry table"""
    __tablename__ = 'time_entries'

    id = Column(Uuid(as_uuid=False), primary_key=True, default=new_id)
    employee_id = Column(Uuid(as_uuid=False), ForeignKey('employees.id'), nullable=False)

    # Start-of-day instant of the entry's calendar day
    date = Column(DateTime(timezone=True), nullable=False)
    entry_time = Column(DateTime(timezone=True), nullable=False)
    exit_time = Column(DateTime(timezone=True))

    status = Column(
        SQLEnum(
            TimeEntryStatus,
            name="time_entry_status",
            values_callable=lambda statuses: [s.value for s in statuses]
        ),
        default=TimeEntryStatus.PENDING,
        nullable=False
    )
    notes = Column(Text)

    # Caller supplied figures
    daily_rate = Column(Float)
    extra_hours = Column(Float)
    extra_hours_rate = Column(Float)
    total = Column(Float)

    # Derived hours
    regular_hours = Column(Numeric(8, 2))
    total_hours = Column(Numeric(8, 2))

    # Approval workflow, actor ids come from the token subject
    approved_by = Column(Text)
    approved_at = Column(DateTime(timezone=True))
    rejected_by = Column(Text)
    rejected_at = Column(DateTime(timezone=True))
    rejected_reason = Column(Text)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relationships
    employee = relationship("EmployeeModel", back_populates="time_entries")

    # Constraints and indexes
    __table_args__ = (
        UniqueConstraint('employee_id', 'date', name='uq_time_entries_employee_date'),
        Index('idx_time_entries_date_entry', 'date', 'entry_time'),
        CheckConstraint(
            'exit_time IS NULL OR entry_time <= exit_time',
            name='time_entry_valid_range'
        ),
    )
