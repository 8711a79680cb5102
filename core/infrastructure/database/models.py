"""
SQLAlchemy ORM Models.

Tables backing the cross-process run lease and the run history.
"""
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base


Base = declarative_base()


def _naive_utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


# =============================================================================
# RUN LEASE MODEL
# =============================================================================

class RunLeaseModel(Base):
    """
    Single-flight lease.

    One row per lock name. Timestamps are naive UTC. A lease whose expires_at is in the past is
    free to be taken over, so a crashed run cannot hold the lock forever.
    """

    __tablename__ = "run_leases"

    name = Column(String(100), primary_key=True)
    holder = Column(String(100), nullable=False)
    acquired_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<RunLeaseModel(name={self.name}, holder={self.holder}, expires_at={self.expires_at})>"


# =============================================================================
# RUN HISTORY MODEL
# =============================================================================

class RunHistoryModel(Base):
    """One row per finished orchestrator run."""

    __tablename__ = "run_history"

    run_id = Column(String(36), primary_key=True)
    started_at = Column(DateTime, nullable=False, index=True)
    finished_at = Column(DateTime, nullable=False)

    processed_count = Column(Integer, nullable=False, default=0)
    success_count = Column(Integer, nullable=False, default=0)
    failure_count = Column(Integer, nullable=False, default=0)
    persistence_errors = Column(Integer, nullable=False, default=0)

    run_error = Column(Text, nullable=True)
    aborted = Column(Boolean, nullable=False, default=False)
    cancelled = Column(Boolean, nullable=False, default=False)

    # Full report as written to the JSON artifact
    report = Column(JSON, nullable=False)

    created_at = Column(DateTime, default=_naive_utc_now, nullable=False)

    def __repr__(self):
        return f"<RunHistoryModel(run_id={self.run_id}, processed={self.processed_count})>"
