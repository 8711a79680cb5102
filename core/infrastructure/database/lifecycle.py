"""Database Lifecycle Management - Async Version"""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.infrastructure.database.models import Base
from guestflow_sdk.logging import get_logger

logger = get_logger(__name__)

_async_engine: Optional[AsyncEngine] = None
_async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Build a session factory bound to engine."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that don't exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_database(database_url: str, echo: bool = False) -> None:
    """Initialize async database engine and session factory."""
    global _async_engine, _async_session_factory

    if _async_engine is not None:
        return

    logger.info("Initializing database...")
    _async_engine = create_async_engine(database_url, echo=echo, future=True)
    _async_session_factory = create_session_factory(_async_engine)
    await create_tables(_async_engine)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get async session factory."""
    if _async_session_factory is None:
        raise RuntimeError(
            "Database not initialized. Call init_database() first."
        )
    return _async_session_factory


async def close_database() -> None:
    """Close async database engine."""
    global _async_engine, _async_session_factory

    if _async_engine is not None:
        await _async_engine.dispose()

    _async_engine = None
    _async_session_factory = None
