"""Orchestration models - SubmissionAttempt, SubmissionResult, RecordOutcome, RunReport."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from core.domain.enums import SubmissionState
from core.domain.value_objects import RunID


@dataclass
class SubmissionAttempt:
    """Transient state of one portal submission attempt. Never persisted."""

    record_id: str
    started_at: datetime
    state: SubmissionState = SubmissionState.DISCONNECTED
    transitions: list[str] = field(default_factory=list)
    diagnostics: list[str] = field(default_factory=list)
    attachment_submitted: bool = False

    def advance(self, target: SubmissionState) -> None:
        self.transitions.append(f"{self.state.value}->{target.value}")
        self.state = target


@dataclass(frozen=True)
class SubmissionResult:
    """Successful outcome of a portal submission."""

    record_id: str
    state: SubmissionState
    attachment_submitted: bool
    message: str = "Guest submitted successfully"


@dataclass(frozen=True)
class RecordOutcome:
    """Per-record line of a run report."""

    record_id: str
    success: bool
    message: str
    guest_name: str = ""
    attempts: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "recordId": self.record_id,
            "guest": self.guest_name,
            "success": self.success,
            "message": self.message,
            "attempts": self.attempts,
        }


@dataclass(frozen=True)
class RunReport:
    """
    Result of one orchestrator invocation.

    ``processed_count == success_count + failure_count == len(outcomes)``.
    A run-level failure (``run_error``) is not counted as a processed record.
    """

    run_id: RunID
    started_at: datetime
    finished_at: datetime
    outcomes: tuple[RecordOutcome, ...] = ()
    run_error: Optional[str] = None
    aborted: bool = False
    cancelled: bool = False
    persistence_errors: int = 0

    @property
    def processed_count(self) -> int:
        return len(self.outcomes)

    @property
    def success_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)

    @property
    def duration_ms(self) -> int:
        return int((self.finished_at - self.started_at).total_seconds() * 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "runId": str(self.run_id),
            "startedAt": self.started_at.isoformat(),
            "finishedAt": self.finished_at.isoformat(),
            "processed": self.processed_count,
            "successful": self.success_count,
            "failed": self.failure_count,
            "runError": self.run_error,
            "aborted": self.aborted,
            "cancelled": self.cancelled,
            "persistenceErrors": self.persistence_errors,
            "details": [outcome.to_dict() for outcome in self.outcomes],
        }
