from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Annotated

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from vacation_portal.config import get_settings
from vacation_portal.exceptions import AppError, ErrorCode

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Return the singleton async engine, creating it on first call."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.debug,
            pool_pre_ping=True,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the singleton async session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an async database session."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


SessionDep = Annotated[AsyncSession, Depends(get_session)]


@asynccontextmanager
async def transaction(
    session: AsyncSession,
    failure_code: ErrorCode = ErrorCode.UPDATE_FAILED,
) -> AsyncIterator[AsyncSession]:
    """Run a block as one unit of work: commit on success, roll back on any error.

    Storage errors are surfaced as ``AppError(failure_code)`` carrying the driver
    message. Anything else, cancellation included, is re-raised untouched after
    the rollback.
    """
    try:
        yield session
        await session.commit()
    except AppError:
        await session.rollback()
        raise
    except SQLAlchemyError as exc:
        await session.rollback()
        detail = str(getattr(exc, "orig", None) or exc)
        logger.warning("Transaction rolled back (%s): %s", failure_code.value, detail)
        raise AppError(failure_code, detail=detail) from exc
    except BaseException:
        await session.rollback()
        raise


async def dispose_engine() -> None:
    """Dispose the engine and reset singletons. Call on app shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
