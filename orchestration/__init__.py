"""Orchestration layer - guest submission runs with eventing."""

from typing import TYPE_CHECKING, Optional

from .bus import ALL_EVENTS, EventBusProtocol, InMemoryEventBus
from .engine import PortalAutomationEngine, PortalEngineFactory
from .events import Event, EventMetadata
from .models import RecordOutcome, RunReport, SubmissionAttempt, SubmissionResult
from .orchestrator import Orchestrator
from .retry import RetryPolicy, is_retryable

if TYPE_CHECKING:
    from core.settings import AppSettings

__all__ = [
    "ALL_EVENTS",
    "Event",
    "EventBusProtocol",
    "EventMetadata",
    "InMemoryEventBus",
    "Orchestrator",
    "PortalAutomationEngine",
    "PortalEngineFactory",
    "RecordOutcome",
    "RetryPolicy",
    "RunReport",
    "SubmissionAttempt",
    "SubmissionResult",
    "build_file_stager",
    "build_record_store",
    "create_default_orchestrator",
    "is_retryable",
]


def build_record_store(settings: "AppSettings"):
    """SheetsRecordStore over the Google Sheets REST client."""
    from core.infrastructure.record_store import SheetsRecordStore
    from core.infrastructure.record_store.sheets_client import GoogleSheetsClient

    client = GoogleSheetsClient(
        spreadsheet_id=settings.sheets.spreadsheet_id,
        access_token=settings.sheets.access_token,
        api_base_url=settings.sheets.api_base_url,
        timeout_seconds=settings.sheets.request_timeout_seconds,
    )
    return SheetsRecordStore(client, sheet_name=settings.sheets.sheet_name)


def build_file_stager(settings: "AppSettings"):
    """FileStager rooted at the configured download directory."""
    from core.infrastructure.staging import FileStager

    pipeline = settings.pipeline
    return FileStager(
        pipeline.download_dir,
        retry_policy=RetryPolicy(
            max_attempts=pipeline.attachment_fetch_attempts,
            base_delay_seconds=pipeline.attachment_fetch_delay_seconds,
        ),
        timeout_seconds=pipeline.attachment_timeout_seconds,
    )


async def create_default_orchestrator(
    settings: Optional["AppSettings"] = None, service: str = "guest-submission"
) -> Orchestrator:
    """Wire an orchestrator to the Sheets store, the file stager and the Playwright driver.

    Concrete adapters are imported here, not at module level, so the
    orchestration package stays importable without aiohttp or a browser
    runtime.

    Args:
        settings: Application settings (loaded from the environment if None)
        service: Service name stamped on events

    Returns:
        Orchestrator instance
    """
    from core.infrastructure.locking import InProcessRunLock
    from core.infrastructure.portal.playwright_driver import PlaywrightSessionDriver
    from core.infrastructure.reports import JsonReportSink
    from core.settings import get_app_settings

    settings = settings or get_app_settings()
    pipeline = settings.pipeline
    portal = settings.portal

    engine_factory = PortalEngineFactory(
        driver_factory=lambda: PlaywrightSessionDriver.from_settings(portal),
        credentials=portal.credentials,
        context_id=portal.property_id,
        step_timeout=portal.step_timeout_seconds,
        confirmation_timeout=portal.confirmation_timeout_seconds,
    )

    report_sinks = [JsonReportSink(pipeline.report_dir)]
    run_lock = None

    if pipeline.lock_backend == "database" or pipeline.record_history:
        from core.infrastructure.database.lifecycle import get_session_factory, init_database

        await init_database(settings.database.database_url, echo=settings.database.echo_sql)
        session_factory = get_session_factory()

        if pipeline.lock_backend == "database":
            from core.infrastructure.locking.sql_run_lock import SqlRunLock

            run_lock = SqlRunLock(session_factory, lease_seconds=pipeline.lock_lease_seconds)
        if pipeline.record_history:
            from core.infrastructure.reports.sql_history import SqlRunHistorySink

            report_sinks.append(SqlRunHistorySink(session_factory))

    return Orchestrator(
        record_store=build_record_store(settings),
        file_stager=build_file_stager(settings),
        engine_factory=engine_factory,
        run_lock=run_lock or InProcessRunLock(),
        retry_policy=RetryPolicy(
            max_attempts=pipeline.max_attempts,
            base_delay_seconds=pipeline.base_delay_seconds,
        ),
        report_sinks=report_sinks,
        event_bus=InMemoryEventBus(),
        service=service,
    )
