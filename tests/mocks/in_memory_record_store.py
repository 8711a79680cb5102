"""In-memory record store for orchestrator tests."""
from typing import Optional

from core.application.interfaces import IRecordStore
from core.domain import GuestRecord, RecordStatus
from core.domain.exceptions import PersistenceError, RecordStoreUnavailableError


class InMemoryRecordStore(IRecordStore):
    """Holds records by id and keeps every status write in ``history``."""

    def __init__(self, records: list[GuestRecord]) -> None:
        self.records = {record.id: record for record in records}
        self.order = [record.id for record in records]
        self.history: list[tuple[str, RecordStatus, str]] = []
        self.sync_flags: dict[str, dict[str, bool]] = {}
        self.list_calls = 0
        self.unavailable = False
        self.failing_writes: set[RecordStatus] = set()

    async def list_pending(self) -> list[GuestRecord]:
        self.list_calls += 1
        if self.unavailable:
            raise RecordStoreUnavailableError("sheet unreachable")
        pending = []
        for record_id in self.order:
            record = self.records[record_id]
            if record.status is RecordStatus.NEW and not record.missing_required_fields():
                pending.append(record)
        return pending

    async def get_record(self, record_id: str) -> Optional[GuestRecord]:
        if self.unavailable:
            raise RecordStoreUnavailableError("sheet unreachable")
        return self.records.get(record_id)

    async def update_status(
        self, record_id: str, status: RecordStatus, notes: str = ""
    ) -> None:
        if status in self.failing_writes:
            raise PersistenceError(record_id, "write rejected")
        self.history.append((record_id, status, notes))
        record = self.records[record_id]
        self.records[record_id] = record.with_status(status, notes, record.submitted_at)

    async def update_sync_flags(
        self,
        record_id: str,
        portal_synced: Optional[bool] = None,
        downstream_synced: Optional[bool] = None,
    ) -> None:
        flags = self.sync_flags.setdefault(record_id, {})
        if portal_synced is not None:
            flags["portal_synced"] = portal_synced
        if downstream_synced is not None:
            flags["downstream_synced"] = downstream_synced

    def status_of(self, record_id: str) -> RecordStatus:
        return self.records[record_id].status

    def statuses_written(self, record_id: str) -> list[RecordStatus]:
        return [status for rid, status, _ in self.history if rid == record_id]

    def last_note(self, record_id: str) -> str:
        notes = [note for rid, _, note in self.history if rid == record_id]
        return notes[-1] if notes else ""
