"""
Guest submission pipeline CLI.

Usage:
    python -m scripts.guest_pipeline process       # one run, then exit
    python -m scripts.guest_pipeline start         # periodic runs until Ctrl+C
    python -m scripts.guest_pipeline stats         # print statistics and configuration
    python -m scripts.guest_pipeline purge row_5   # delete files kept for a failed record
"""
import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path

from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from core.application.interfaces import IRecordStore  # noqa: E402
from core.domain import RecordStatus  # noqa: E402
from core.domain.exceptions import RecordStoreUnavailableError, RunInProgressError  # noqa: E402
from core.infrastructure.database.lifecycle import close_database, get_session_factory  # noqa: E402
from core.infrastructure.reports.sql_history import SqlRunHistorySink  # noqa: E402
from core.infrastructure.staging import FileStager  # noqa: E402
from core.settings import AppSettings, get_app_settings  # noqa: E402
from guestflow_sdk.logging import configure_logging, get_logger  # noqa: E402
from orchestration import (  # noqa: E402
    Orchestrator,
    build_file_stager,
    build_record_store,
    create_default_orchestrator,
)

logger = get_logger("scripts.guest_pipeline")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="guest_pipeline",
        description="Submit new guest registrations to the Sakani portal.",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("process", help="Process all new guests once")

    start = subparsers.add_parser("start", help="Process new guests periodically")
    start.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between runs (default: PIPELINE_PROCESS_INTERVAL)",
    )
    start.add_argument(
        "--initial-delay",
        type=float,
        default=None,
        help="Seconds before the first run (default: PIPELINE_INITIAL_DELAY)",
    )

    subparsers.add_parser("stats", help="Print statistics and configuration")

    purge = subparsers.add_parser("purge", help="Delete staged files retained for a record")
    purge.add_argument("record_id", help="Record id, e.g. row_5")
    purge.add_argument(
        "--force",
        action="store_true",
        help="Purge even while the record is marked Processing",
    )
    return parser


def _install_stop_handler(orchestrator: Orchestrator) -> None:
    """Route SIGINT/SIGTERM to a cooperative stop."""
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, orchestrator.stop)
        except NotImplementedError:
            # Windows event loops do not support signal handlers
            signal.signal(signum, lambda *_: loop.call_soon_threadsafe(orchestrator.stop))


async def collect_stats(orchestrator: Orchestrator, settings: AppSettings) -> dict:
    """Orchestrator counters, the active configuration and, when recorded, recent runs."""
    stats = orchestrator.stats()
    stats["config"] = {
        "process_interval_seconds": settings.pipeline.process_interval_seconds,
        "spreadsheet_id": settings.sheets.spreadsheet_id,
        "property_id": settings.portal.property_id,
    }
    if settings.pipeline.record_history:
        sink = SqlRunHistorySink(get_session_factory())
        stats["recent_runs"] = await sink.recent(limit=5)
    return stats


async def purge_record(
    record_store: IRecordStore,
    file_stager: FileStager,
    record_id: str,
    force: bool = False,
) -> int:
    """
    Delete the attachment files kept for one record.

    A record still marked Processing may belong to a live run, so it is
    left alone unless force is set.

    Returns:
        Process exit code
    """
    try:
        record = await record_store.get_record(record_id)
    except (ValueError, RecordStoreUnavailableError) as exc:
        logger.error(f"❌ Could not look up {record_id}: {exc}")
        return 1

    if record is None:
        logger.warning(f"{record_id} not found in the record store, purging staged files anyway")
    elif record.status is RecordStatus.PROCESSING and not force:
        logger.error(f"{record_id} is still Processing; rerun with --force to purge")
        return 1

    removed = await file_stager.purge(record_id)
    print(json.dumps({"record_id": record_id, "removed": removed}))
    return 0


async def run_command(args: argparse.Namespace) -> int:
    settings = get_app_settings()
    if args.command == "purge":
        return await purge_record(
            build_record_store(settings),
            build_file_stager(settings),
            args.record_id,
            force=args.force,
        )

    orchestrator = await create_default_orchestrator(settings)
    _install_stop_handler(orchestrator)

    try:
        if args.command == "start":
            interval = args.interval or settings.pipeline.process_interval_seconds
            initial_delay = (
                settings.pipeline.initial_delay_seconds
                if args.initial_delay is None
                else args.initial_delay
            )
            logger.info("Press Ctrl+C to stop")
            await orchestrator.run_periodic(interval, initial_delay=initial_delay)
            return 0

        if args.command == "stats":
            print(json.dumps(await collect_stats(orchestrator, settings), indent=2, default=str))
            return 0

        try:
            report = await orchestrator.run_once()
        except RunInProgressError as exc:
            logger.error(str(exc))
            return 2
        return 1 if report.aborted else 0
    finally:
        await close_database()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return asyncio.run(run_command(args))


if __name__ == "__main__":
    sys.exit(main())
