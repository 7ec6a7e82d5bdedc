"""
Time entry repository implementation using SQLAlchemy.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.domain.models.base import (
    EntityNotFoundError,
    ExitAlreadyRegisteredError,
    RepositoryError,
    UniqueConstraintViolation,
    ValidationError,
    utcnow,
)
from timeclock.domain.models.time_entry import TimeEntry
from timeclock.domain.repositories.time_entry_repository import TimeEntryRepository as TimeEntryRepositoryInterface
from timeclock.domain.services.clock import DayWindow
from timeclock.infrastructure.db.models import TimeEntryModel
from timeclock.infrastructure.mappers.time_entry_mapper import TimeEntryMapper

logger = logging.getLogger(__name__)


UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """Tell unique-key violations apart from other integrity errors."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    return "unique" in str(orig).lower()


class SQLAlchemyTimeEntryRepository(TimeEntryRepositoryInterface):
    """
    SQLAlchemy implementation of time entry repository.
    Each write commits on its own unless it runs inside transaction().
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.mapper = TimeEntryMapper()
        self.model = TimeEntryModel
        self._in_transaction = False

    def canonical_id(self, raw: Any) -> str:
        entry_id = super().canonical_id(raw)
        try:
            return str(uuid.UUID(entry_id))
        except ValueError:
            raise ValidationError(f"Invalid time entry id: {entry_id}", "id")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SQLAlchemyTimeEntryRepository"]:
        """Run the enclosed calls in one database transaction."""
        if self._in_transaction:
            yield self
            return

        # Close the autobegun transaction left by earlier reads
        if self.session.in_transaction():
            await self.session.commit()

        self._in_transaction = True
        try:
            async with self.session.begin():
                yield self
        except SQLAlchemyError as exc:
            raise self._translate(exc) from exc
        finally:
            self._in_transaction = False

    async def find_by_id(self, entry_id: str, for_update: bool = False) -> Optional[TimeEntry]:
        """Find time entry by ID, optionally locking the row."""
        stmt = select(TimeEntryModel).where(TimeEntryModel.id == entry_id)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)

        model = await self._scalar(stmt)
        if not model:
            return None

        return self.mapper.model_to_domain(model)

    async def find_for_employee_on_day(
        self,
        employee_id: str,
        window: DayWindow
    ) -> Optional[TimeEntry]:
        """Find the employee's entry inside a day window."""
        stmt = select(TimeEntryModel).where(
            TimeEntryModel.employee_id == employee_id,
            TimeEntryModel.date >= window.start,
            TimeEntryModel.date <= window.end,
        ).limit(1)

        model = await self._scalar(stmt)
        if not model:
            return None

        return self.mapper.model_to_domain(model)

    async def find_many(
        self,
        employee_id: Optional[str] = None,
        window: Optional[DayWindow] = None
    ) -> List[TimeEntry]:
        """Find entries by employee and/or date window."""
        stmt = select(TimeEntryModel)
        if employee_id is not None:
            stmt = stmt.where(TimeEntryModel.employee_id == employee_id)
        if window is not None:
            stmt = stmt.where(
                TimeEntryModel.date >= window.start,
                TimeEntryModel.date <= window.end,
            )
        stmt = stmt.order_by(TimeEntryModel.date.desc(), TimeEntryModel.entry_time.asc())

        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise self._translate(exc) from exc

        return [self.mapper.model_to_domain(model) for model in result.scalars().all()]

    async def add(self, time_entry: TimeEntry) -> TimeEntry:
        """Insert a new time entry."""
        model = self.mapper.domain_to_model(time_entry)
        self.session.add(model)
        await self._persist()
        return await self._reload(model)

    async def update(self, entry_id: str, changes: Dict[str, Any]) -> TimeEntry:
        """Apply a partial update to a stored entry."""
        model = await self._scalar(select(TimeEntryModel).where(TimeEntryModel.id == entry_id))
        if not model:
            raise EntityNotFoundError("TimeEntry", entry_id)

        for attr, value in self.mapper.changes_to_columns(changes).items():
            setattr(model, attr, value)
        model.updated_at = utcnow()

        await self._persist()
        return await self._reload(model)

    async def register_exit(self, entry_id: str, changes: Dict[str, Any]) -> TimeEntry:
        """
        Conditional update guarded by exit_time IS NULL.
        SQLite ignores FOR UPDATE, so the guard is what keeps the exit single.
        """
        values = self.mapper.changes_to_columns(changes)
        values["updated_at"] = utcnow()
        stmt = (
            update(TimeEntryModel)
            .where(TimeEntryModel.id == entry_id, TimeEntryModel.exit_time.is_(None))
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise self._translate(exc) from exc
        await self._persist()

        model = await self._scalar(
            select(TimeEntryModel)
            .where(TimeEntryModel.id == entry_id)
            .execution_options(populate_existing=True)
        )
        if not model:
            raise EntityNotFoundError("TimeEntry", entry_id)
        if result.rowcount == 0:
            logger.info(f"Exit for time entry {entry_id} was registered by another writer")
            raise ExitAlreadyRegisteredError(entry_id)

        return self.mapper.model_to_domain(model)

    async def delete(self, entry_id: str) -> bool:
        """Delete time entry by ID."""
        try:
            result = await self.session.execute(
                delete(TimeEntryModel).where(TimeEntryModel.id == entry_id)
            )
        except SQLAlchemyError as exc:
            raise self._translate(exc) from exc

        await self._persist()
        return result.rowcount > 0

    async def _scalar(self, stmt) -> Optional[TimeEntryModel]:
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise self._translate(exc) from exc
        return result.scalars().first()

    async def _reload(self, model: TimeEntryModel) -> TimeEntry:
        try:
            await self.session.refresh(model)
        except SQLAlchemyError as exc:
            raise self._translate(exc) from exc
        return self.mapper.model_to_domain(model)

    async def _persist(self) -> None:
        """Flush inside a transaction block, commit otherwise."""
        try:
            if self._in_transaction:
                await self.session.flush()
            else:
                await self.session.commit()
        except SQLAlchemyError as exc:
            if not self._in_transaction:
                await self.session.rollback()
            raise self._translate(exc) from exc

    def _translate(self, exc: SQLAlchemyError) -> RepositoryError:
        if isinstance(exc, IntegrityError) and is_unique_violation(exc):
            return UniqueConstraintViolation("uq_time_entries_employee_date")

        logger.error(f"Time entry storage failure: {type(exc).__name__}: {exc}")
        return RepositoryError()
