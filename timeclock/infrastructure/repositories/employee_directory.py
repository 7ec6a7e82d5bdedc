"""
Employee directory backed by the employees and users tables.
"""

import logging
import uuid
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.domain.models.base import RepositoryError, ValidationError
from timeclock.domain.models.employee import PersonSummary
from timeclock.domain.repositories.employee_directory import EmployeeDirectory
from timeclock.infrastructure.db.models import EmployeeModel, UserModel

logger = logging.getLogger(__name__)


def _as_uuid_text(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    try:
        return str(uuid.UUID(str(raw).strip()))
    except ValueError:
        return None


class SQLAlchemyEmployeeDirectory(EmployeeDirectory):
    """Read-only lookups over employees and user accounts."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def canonical_key(self, raw: str) -> str:
        key = _as_uuid_text(raw)
        if key is None:
            raise ValidationError(f"Invalid employee reference: {raw}", "employee")
        return key

    async def employee_exists(self, employee_id: str) -> bool:
        rows = await self._fetch(
            select(EmployeeModel.id).where(EmployeeModel.id == employee_id)
        )
        return bool(rows)

    async def summarize_employees(self, employee_ids: Iterable[str]) -> Dict[str, PersonSummary]:
        ids = self._valid_ids(employee_ids)
        if not ids:
            return {}

        rows = await self._fetch(
            select(EmployeeModel.id, EmployeeModel.name, EmployeeModel.email)
            .where(EmployeeModel.id.in_(ids))
        )
        return {row.id: PersonSummary(id=row.id, name=row.name, email=row.email) for row in rows}

    async def summarize_users(self, user_ids: Iterable[Optional[str]]) -> Dict[str, PersonSummary]:
        ids = self._valid_ids(user_ids)
        if not ids:
            return {}

        rows = await self._fetch(
            select(UserModel.id, UserModel.name, UserModel.username, UserModel.email)
            .where(UserModel.id.in_(ids))
        )
        return {
            row.id: PersonSummary(id=row.id, name=row.name or row.username, email=row.email)
            for row in rows
        }

    def _valid_ids(self, raw_ids: Iterable[Optional[str]]) -> List[str]:
        # Actor ids are opaque; only those shaped like user keys can match a row
        return sorted({key for key in map(_as_uuid_text, raw_ids) if key is not None})

    async def _fetch(self, stmt) -> list:
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error(f"Directory lookup failed: {type(exc).__name__}: {exc}")
            raise RepositoryError() from exc
        return list(result.all())
