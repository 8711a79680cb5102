"""Orchestrator - runs the guest submission pipeline over pending records."""

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from core.application.interfaces import IRecordStore, IReportSink, IRunLock
from core.domain import AttachmentStage, GuestRecord, RecordStatus
from core.domain.exceptions import AuthenticationError, RunInProgressError
from core.domain.value_objects import RunID
from core.infrastructure.locking import InProcessRunLock
from guestflow_sdk.logging import get_logger
from guestflow_sdk.utils.datetime import utc_now

from .bus import EventBusProtocol, InMemoryEventBus
from .engine import PortalAutomationEngine
from .events import (
    RECORD_COMPLETED,
    RECORD_FAILED,
    RUN_ABORTED,
    RUN_FINISHED,
    RUN_STARTED,
    Event,
    EventMetadata,
)
from .models import RecordOutcome, RunReport
from .retry import RetryPolicy

if TYPE_CHECKING:
    from core.infrastructure.staging import FileStager

EngineFactory = Callable[[], PortalAutomationEngine]


@dataclass
class _RunState:
    """Mutable accumulator owned by the single in-flight run."""

    run_id: RunID
    started_at: datetime
    outcomes: list[RecordOutcome]
    run_error: Optional[str] = None
    aborted: bool = False
    cancelled: bool = False
    persistence_errors: int = 0
    # Latest lifecycle snapshot of each record touched in this run
    records: dict[str, GuestRecord] = field(default_factory=dict)


class Orchestrator:
    """
    Orchestrator for guest submission runs.

    Records are processed strictly one at a time, in the order the record
    store returns them. At most one run is active per run lock; a second
    invocation is rejected with RunInProgressError.
    """

    def __init__(
        self,
        record_store: IRecordStore,
        file_stager: "FileStager",
        engine_factory: EngineFactory,
        run_lock: Optional[IRunLock] = None,
        retry_policy: Optional[RetryPolicy] = None,
        report_sinks: Sequence[IReportSink] = (),
        event_bus: Optional[EventBusProtocol] = None,
        service: str = "guest-submission",
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            record_store: Source of pending records and sink for status updates
            file_stager: Stages attachments for each attempt
            engine_factory: Returns a fresh single-use engine per attempt
            run_lock: Single-flight lock (in-process by default)
            retry_policy: Retry policy wrapped around each submission
            report_sinks: Destinations for finished run reports
            event_bus: Bus receiving run and record lifecycle events
            service: Service name stamped on events
        """
        self._record_store = record_store
        self._file_stager = file_stager
        self._engine_factory = engine_factory
        self._run_lock = run_lock or InProcessRunLock()
        self._retry_policy = retry_policy or RetryPolicy()
        self._report_sinks = list(report_sinks)
        self._event_bus = event_bus or InMemoryEventBus()
        self._service = service
        self._logger = get_logger("orchestration.orchestrator")

        self._stop_event = asyncio.Event()
        self._periodic_running = False
        self._current_run: Optional[RunID] = None
        self._stats: dict[str, Any] = {
            "total_processed": 0,
            "successful": 0,
            "failed": 0,
            "runs": 0,
            "last_run": None,
            "last_run_error": None,
        }

    @property
    def is_running(self) -> bool:
        """True while this orchestrator has a run in flight."""
        return self._current_run is not None

    @property
    def event_bus(self) -> EventBusProtocol:
        return self._event_bus

    def stop(self) -> None:
        """Request cooperative cancellation of the periodic loop and the current run."""
        self._stop_event.set()
        self._logger.info("🛑 Stop requested")

    def stats(self) -> dict[str, Any]:
        """Cumulative counters across runs of this orchestrator."""
        last_run = self._stats["last_run"]
        return {
            **self._stats,
            "last_run": last_run.isoformat() if last_run else None,
            "is_running": self.is_running,
            "periodic": self._periodic_running,
        }

    async def run_once(self) -> RunReport:
        """
        Run one batch: fetch pending records and submit each in turn.

        Returns:
            RunReport for this invocation

        Raises:
            RunInProgressError: If another run holds the run lock
        """
        run_id = RunID.generate()
        holder = str(run_id)
        if not await self._run_lock.try_acquire(holder):
            self._logger.warning("Run already in progress, rejecting new invocation")
            raise RunInProgressError("A guest submission run is already in progress")

        # Cleared only once the lock is ours
        if not self._periodic_running:
            self._stop_event.clear()
        self._current_run = run_id
        try:
            report = await self._run(run_id)
        finally:
            self._current_run = None
            await self._run_lock.release(holder)

        return report

    async def run_periodic(self, interval: float, initial_delay: float = 0.0) -> None:
        """
        Call run_once every interval seconds until stop() is called.

        Args:
            interval: Seconds between the end of one cycle and the next
            initial_delay: Seconds to wait before the first cycle
        """
        if self._periodic_running:
            self._logger.info("Periodic processing already running")
            return

        self._periodic_running = True
        self._stop_event.clear()
        self._logger.info(f"🔄 Starting periodic processing (every {interval:.0f} seconds)")
        try:
            if await self._wait_for_stop(initial_delay):
                return
            while not self._stop_event.is_set():
                try:
                    await self.run_once()
                except RunInProgressError:
                    self._logger.warning("Previous run still in progress, skipping this cycle")
                except Exception as exc:
                    self._logger.error(f"Error in periodic processing: {exc}", exc_info=True)

                if await self._wait_for_stop(interval):
                    break
        finally:
            self._periodic_running = False
            self._logger.info("Stopped periodic processing")

    async def _wait_for_stop(self, timeout: float) -> bool:
        """Sleep up to timeout seconds; return True as soon as a stop is requested."""
        if timeout <= 0:
            return self._stop_event.is_set()
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def _run(self, run_id: RunID) -> RunReport:
        state = _RunState(run_id=run_id, started_at=utc_now(), outcomes=[])
        self._logger.info(f"=== Processing new guests (run {run_id}) ===")
        await self._publish_event(RUN_STARTED, run_id, {})

        try:
            pending = await self._record_store.list_pending()
        except Exception as exc:
            state.run_error = f"Could not read pending records: {exc}"
            state.aborted = True
            self._logger.error(f"❌ {state.run_error}", exc_info=True)
        else:
            self._logger.info(f"Found {len(pending)} new guests to process")
            await self._process_all(pending, state)

        report = RunReport(
            run_id=run_id,
            started_at=state.started_at,
            finished_at=utc_now(),
            outcomes=tuple(state.outcomes),
            run_error=state.run_error,
            aborted=state.aborted,
            cancelled=state.cancelled,
            persistence_errors=state.persistence_errors,
        )
        self._record_stats(report)
        await self._save_report(report)

        self._logger.info("=== Processing summary ===")
        self._logger.info(
            f"Total: {report.processed_count} | Successful: {report.success_count} | "
            f"Failed: {report.failure_count}"
        )
        await self._publish_event(
            RUN_ABORTED if report.aborted else RUN_FINISHED,
            run_id,
            {
                "processed": report.processed_count,
                "successful": report.success_count,
                "failed": report.failure_count,
                "run_error": report.run_error,
                "cancelled": report.cancelled,
            },
        )
        return report

    async def _process_all(self, pending: list[GuestRecord], state: _RunState) -> None:
        for index, record in enumerate(pending):
            if self._stop_event.is_set():
                state.cancelled = True
                self._logger.info(
                    f"Stop requested, leaving {len(pending) - index} record(s) for the next run"
                )
                return

            self._logger.info(f"--- Processing: {record.full_name} ({record.id}) ---")
            try:
                outcome = await self._process_record(record, state)
            except AuthenticationError as exc:
                state.run_error = f"Portal authentication failed: {exc}"
                state.aborted = True
                self._logger.error(
                    f"❌ {state.run_error}. Aborting run, "
                    f"{len(pending) - index - 1} record(s) left untouched"
                )
                await self._write_status(
                    record,
                    RecordStatus.FAILED,
                    f"Run aborted: portal authentication failed: {exc}",
                    state,
                )
                return
            except Exception as exc:
                self._logger.error(f"❌ Error processing {record.full_name}: {exc}", exc_info=True)
                message = f"Processing error: {exc}"
                await self._write_status(record, RecordStatus.FAILED, message, state)
                outcome = RecordOutcome(
                    record_id=record.id,
                    success=False,
                    message=message,
                    guest_name=record.full_name,
                )
            state.outcomes.append(outcome)

    async def _process_record(self, record: GuestRecord, state: _RunState) -> RecordOutcome:
        await self._write_status(
            record, RecordStatus.PROCESSING, "Started automated processing", state
        )

        stage: Optional[AttachmentStage] = None
        if record.primary_attachment:
            stage = await self._file_stager.stage(record.id, record.primary_attachment)
        else:
            self._logger.info(f"No attachment found for {record.full_name}")
        attachment = stage.local_path if stage else None

        attempts = 0

        async def submit_once():
            nonlocal attempts
            attempts += 1
            engine = self._engine_factory()
            return await engine.submit(record, attachment)

        try:
            result = await self._retry_policy.run(submit_once)
        except AuthenticationError:
            raise
        except Exception as exc:
            message = f"Portal submission failed after {attempts} attempt(s): {exc}"
            await self._write_status(record, RecordStatus.FAILED, message, state)
            if stage is not None:
                self._logger.info(f"Keeping staged attachment for diagnosis: {stage.local_path}")
            self._logger.info(f"❌ {record.full_name} failed: {exc}")
            await self._publish_event(
                RECORD_FAILED, state.run_id, {"record_id": record.id, "error": str(exc)}
            )
            return RecordOutcome(
                record_id=record.id,
                success=False,
                message=message,
                guest_name=record.full_name,
                attempts=attempts,
            )

        await self._write_status(record, RecordStatus.COMPLETED, result.message, state)
        await self._write_sync_flag(record, state)
        if stage is not None:
            await self._file_stager.release(stage)
        self._logger.info(f"✅ {record.full_name} completed successfully")
        await self._publish_event(
            RECORD_COMPLETED,
            state.run_id,
            {"record_id": record.id, "attempts": attempts},
        )
        return RecordOutcome(
            record_id=record.id,
            success=True,
            message=result.message,
            guest_name=record.full_name,
            attempts=attempts,
        )

    async def _write_status(
        self, record: GuestRecord, status: RecordStatus, notes: str, state: _RunState
    ) -> bool:
        """
        Best-effort status write; failures are logged and counted, never raised.

        A write the lifecycle does not allow (e.g. Failed over Completed) is
        refused and nothing reaches the store.
        """
        current = state.records.get(record.id, record)
        if not current.status.can_transition_to(status):
            self._logger.error(
                f"Refusing status change {current.status.value} -> {status.value} for {record.id}"
            )
            return False
        state.records[record.id] = current.with_status(status, notes, utc_now())

        try:
            await self._record_store.update_status(record.id, status, notes)
        except Exception as exc:
            state.persistence_errors += 1
            self._logger.error(f"Could not write status {status.value} for {record.id}: {exc}")
            return False
        return True

    async def _write_sync_flag(self, record: GuestRecord, state: _RunState) -> None:
        try:
            await self._record_store.update_sync_flags(record.id, portal_synced=True)
        except Exception as exc:
            state.persistence_errors += 1
            self._logger.error(f"Could not write sync flag for {record.id}: {exc}")

    async def _save_report(self, report: RunReport) -> None:
        for sink in self._report_sinks:
            try:
                location = await sink.save(report)
            except Exception as exc:
                self._logger.error(f"Error saving run report to {sink!r}: {exc}", exc_info=True)
                continue
            if location:
                self._logger.info(f"📄 Results saved to {location}")

    def _record_stats(self, report: RunReport) -> None:
        self._stats["total_processed"] += report.processed_count
        self._stats["successful"] += report.success_count
        self._stats["failed"] += report.failure_count
        self._stats["runs"] += 1
        self._stats["last_run"] = report.finished_at
        self._stats["last_run_error"] = report.run_error

    async def _publish_event(
        self, name: str, run_id: RunID, payload: dict[str, object]
    ) -> None:
        """Publish an event.

        Args:
            name: Event name
            run_id: RunID
            payload: Event payload
        """
        metadata = EventMetadata(
            run_id=str(run_id),
            service=self._service,
            timestamp=utc_now(),
        )
        event = Event(name=name, payload=payload, metadata=metadata)
        await self._event_bus.publish(event)
