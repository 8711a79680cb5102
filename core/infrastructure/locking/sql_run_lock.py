"""
Database-backed run lease.

Lets several processes (API workers, a cron-driven CLI) share one
single-flight lock. The lease expires after lease_seconds.
"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.application.interfaces import IRunLock
from core.infrastructure.database.models import RunLeaseModel
from guestflow_sdk.logging import get_logger
from guestflow_sdk.utils.datetime import utc_now

logger = get_logger(__name__)

DEFAULT_LOCK_NAME = "guest-submission"


def _naive_utc_now() -> datetime:
    return utc_now().replace(tzinfo=None)


class SqlRunLock(IRunLock):
    """Run lock stored as a lease row in the run_leases table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        name: str = DEFAULT_LOCK_NAME,
        lease_seconds: float = 3600.0,
    ) -> None:
        """
        Initialize lease lock.

        Args:
            session_factory: Async session factory for the lease table
            name: Lock name (one row per name)
            lease_seconds: Lease duration; an older lease can be taken over
        """
        self._session_factory = session_factory
        self._name = name
        self._lease_seconds = lease_seconds

    async def try_acquire(self, holder: str) -> bool:
        now = _naive_utc_now()
        expires_at = now + timedelta(seconds=self._lease_seconds)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(
                        update(RunLeaseModel)
                        .where(
                            RunLeaseModel.name == self._name,
                            RunLeaseModel.expires_at <= now,
                        )
                        .values(holder=holder, acquired_at=now, expires_at=expires_at)
                    )
                    if result.rowcount == 1:
                        logger.warning(f"Took over expired run lease {self._name!r}")
                        return True

                    existing = await session.get(RunLeaseModel, self._name)
                    if existing is not None:
                        return False

                    session.add(
                        RunLeaseModel(
                            name=self._name,
                            holder=holder,
                            acquired_at=now,
                            expires_at=expires_at,
                        )
                    )
        except IntegrityError:
            # Another process inserted the lease row first.
            return False
        return True

    async def release(self, holder: str) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(
                    delete(RunLeaseModel).where(
                        RunLeaseModel.name == self._name,
                        RunLeaseModel.holder == holder,
                    )
                )

    async def is_held(self) -> bool:
        return await self.current_holder() is not None

    async def current_holder(self) -> Optional[str]:
        """Holder of the live lease, or None."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(RunLeaseModel.holder).where(
                    RunLeaseModel.name == self._name,
                    RunLeaseModel.expires_at > _naive_utc_now(),
                )
            )
            return result.scalar_one_or_none()
