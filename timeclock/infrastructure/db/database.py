"""
Database configuration and session management.
"""

import logging
from functools import lru_cache
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from timeclock.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


@lru_cache()
def get_engine() -> AsyncEngine:
    """
    Create the async engine on first use.
    """
    url = settings.database_url_async
    logger.info(f"Creating database engine for {url.split('://', 1)[0]}")
    return create_async_engine(
        url,
        echo=settings.database_echo,
        pool_pre_ping=not url.startswith("sqlite"),
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory whose objects stay readable after commit."""
    return async_sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )


@lru_cache()
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return create_session_factory(get_engine())


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function to get database session.
    """
    async with get_session_factory()() as session:
        yield session


async def create_all_tables(engine: AsyncEngine | None = None) -> None:
    """Create every table known to the ORM models."""
    # Registers the model classes on Base.metadata
    from timeclock.infrastructure.db import models  # noqa: F401

    engine = engine or get_engine()
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Close pooled connections."""
    if get_engine.cache_info().currsize:
        await get_engine().dispose()
