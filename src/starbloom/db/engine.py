"""Async SQLAlchemy engine, session factory, and store-operation guard.

One engine with connection pooling, one AsyncSession per request via
FastAPI dependency injection. Every statement a service issues runs
inside store_operation(), which bounds it in time and translates driver
failures into StoreError so raw database text never reaches a client.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm.exc import StaleDataError

from starbloom.config import settings
from starbloom.errors import StoreError, StoreTimeout

# Connection pool: min 5, max 20 connections.
# echo=True in dev to see SQL queries.
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_size=5,
    max_overflow=15,
)

# Session factory — each request gets its own session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def store_operation(timeout: Optional[float] = None):
    """Bound a block of store calls and normalize its failures.

    Constraint violations and optimistic-lock misses pass through untouched
    so services can map them onto domain errors (already liked, edit
    conflict, ...). Anything else from the driver becomes StoreError.
    """
    budget = timeout if timeout is not None else settings.store_timeout_seconds
    try:
        async with asyncio.timeout(budget):
            yield
    except TimeoutError as e:
        raise StoreTimeout(f"store operation exceeded {budget}s") from e
    except (IntegrityError, StaleDataError):
        raise
    except SQLAlchemyError as e:
        raise StoreError(str(e)) from e


async def commit(session: AsyncSession) -> None:
    """Commit the request's unit of work under the store guard."""
    async with store_operation():
        await session.commit()
