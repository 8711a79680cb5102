"""Run history rows in the database."""
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.application.interfaces import IReportSink
from core.infrastructure.database.models import RunHistoryModel

if TYPE_CHECKING:
    from orchestration.models import RunReport


def _naive_utc(moment: datetime) -> datetime:
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


class SqlRunHistorySink(IReportSink):
    """Stores each run report as a run_history row."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(self, report: "RunReport") -> Optional[str]:
        async with self._session_factory() as session:
            async with session.begin():
                session.add(
                    RunHistoryModel(
                        run_id=str(report.run_id),
                        started_at=_naive_utc(report.started_at),
                        finished_at=_naive_utc(report.finished_at),
                        processed_count=report.processed_count,
                        success_count=report.success_count,
                        failure_count=report.failure_count,
                        persistence_errors=report.persistence_errors,
                        run_error=report.run_error,
                        aborted=report.aborted,
                        cancelled=report.cancelled,
                        report=report.to_dict(),
                    )
                )
        return None

    async def recent(self, limit: int = 20) -> list[dict]:
        """Most recent run reports, newest first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(RunHistoryModel.report)
                .order_by(RunHistoryModel.started_at.desc())
                .limit(limit)
            )
            return list(result.scalars().all())
