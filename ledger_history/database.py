"""
Database engine and request-scoped transactions.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache

from loguru import logger
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ledger_history.config.settings import settings
from ledger_history.utils.exceptions import StoreUnavailableError, is_store_error


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """Create the async engine from settings."""
    return create_async_engine(
        database_url or settings.async_database_url,
        echo=settings.database_echo,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,
    )


def create_session_maker(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Create a session maker bound to an engine."""
    if engine is None:
        engine = create_engine()
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@lru_cache(maxsize=1)
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Process-wide session maker, created on first use."""
    return create_session_maker()


@asynccontextmanager
async def read_transaction(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Open one working transaction for a request.

    The transaction is always ended: committed when the block completes,
    rolled back when it raises. Nothing is ever written through it, so the
    commit only releases the snapshot.

    Usage:
        async with read_transaction(session_maker) as session:
            service = HistoryService(session)
            page = await service.page(address)

    Raises:
        StoreUnavailableError: If the store cannot open or end the transaction
    """
    async with session_maker() as session:
        try:
            async with session.begin():
                yield session
        except StoreUnavailableError:
            raise
        except Exception as e:
            if not is_store_error(e):
                raise
            logger.error(f"[Database] Read transaction failed: {e}")
            raise StoreUnavailableError("read_transaction", e) from e
