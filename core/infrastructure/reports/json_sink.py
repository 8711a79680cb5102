"""JSON run report artifacts, one file per run named by its start time."""
import asyncio
import json
from pathlib import Path
from typing import TYPE_CHECKING

from core.application.interfaces import IReportSink
from guestflow_sdk.utils.datetime import timestamp_slug

if TYPE_CHECKING:
    from orchestration.models import RunReport

REPORT_PREFIX = "processing-results-"


class JsonReportSink(IReportSink):
    """Writes ``processing-results-<timestamp>.json`` into report_dir."""

    def __init__(self, report_dir: Path | str) -> None:
        self._report_dir = Path(report_dir)

    def path_for(self, report: "RunReport") -> Path:
        return self._report_dir / f"{REPORT_PREFIX}{timestamp_slug(report.started_at)}.json"

    async def save(self, report: "RunReport") -> str:
        path = self.path_for(report)
        payload = json.dumps(report.to_dict(), indent=2, ensure_ascii=False)
        await asyncio.to_thread(self._write, path, payload)
        return str(path)

    @staticmethod
    def _write(path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload, encoding="utf-8")
