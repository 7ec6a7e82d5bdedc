"""
Base use case classes for the application layer.
Provides common patterns and structure for use case implementations.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, TypeVar, Generic
from datetime import datetime

from timeclock.domain.models.base import (
    DomainException,
    DuplicateEntryError,
    UniqueConstraintViolation,
    utcnow,
)

logger = logging.getLogger(__name__)


R = TypeVar('R')


class BaseUseCase(ABC, Generic[R]):
    """
    Base class for all use cases.
    Provides common structure, timing and error logging. Domain errors are
    re-raised unchanged for the caller to translate.
    """

    def __init__(self):
        self.execution_start: Optional[datetime] = None
        self.execution_end: Optional[datetime] = None

    async def execute(self, *args: Any, **kwargs: Any) -> R:
        """
        Execute the use case with proper error handling and logging.
        """
        name = type(self).__name__
        self.execution_start = utcnow()

        try:
            result = await self._execute_business_logic(*args, **kwargs)
        except DomainException as exc:
            logger.info("%s rejected: %s (%s)", name, exc.message, exc.code)
            raise
        except Exception:
            logger.exception("%s failed unexpectedly", name)
            raise
        finally:
            self.execution_end = utcnow()

        execution_time = (self.execution_end - self.execution_start).total_seconds()
        logger.debug("%s completed in %.3fs", name, execution_time)
        return result

    @abstractmethod
    async def _execute_business_logic(self, *args: Any, **kwargs: Any) -> R:
        """
        Execute the core business logic. Must be implemented by subclasses.
        """
        pass


class QueryUseCase(BaseUseCase[R]):
    """
    Base class for query use cases (read operations).
    """
    pass


class CommandUseCase(BaseUseCase[R]):
    """
    Base class for command use cases (write operations).
    Storage uniqueness violations surface as DuplicateEntryError.
    """

    async def _execute_business_logic(self, *args: Any, **kwargs: Any) -> R:
        try:
            return await self._execute_command_logic(*args, **kwargs)
        except UniqueConstraintViolation as exc:
            raise DuplicateEntryError() from exc

    @abstractmethod
    async def _execute_command_logic(self, *args: Any, **kwargs: Any) -> R:
        """Execute the command logic. Must be implemented by subclasses."""
        pass


# Specific use case patterns
class CreateUseCase(CommandUseCase[R]):
    """Base class for entity creation use cases."""
    pass


class UpdateUseCase(CommandUseCase[R]):
    """Base class for entity update use cases."""
    pass


class DeleteUseCase(CommandUseCase[R]):
    """Base class for entity deletion use cases."""
    pass


class ListUseCase(QueryUseCase[R]):
    """Base class for list use cases."""
    pass
