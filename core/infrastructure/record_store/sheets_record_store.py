"""
Sheets-backed record store.

Each sheet row below the header is one guest. The record id is
``row_<n>`` with ``n`` the 1-based sheet row, so ids stay stable as long
as rows are only appended.
"""
import re
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any, Optional

from core.application.interfaces import IRecordStore, ISheetValuesClient
from core.domain import GuestRecord, RecordStatus
from core.domain.entities.guest import DEFAULT_CHECK_IN_TIME, DEFAULT_CHECK_OUT_TIME
from core.domain.exceptions import (
    PersistenceError,
    RecordStoreUnavailableError,
    ValidationError,
)
from core.domain.value_objects import nationality_code_for
from guestflow_sdk.logging import get_logger
from guestflow_sdk.utils.datetime import parse_datetime, utc_now

from .field_aliases import GUEST_FIELD_ALIASES, ColumnMap, FieldAlias

logger = get_logger(__name__)

_ROW_ID = re.compile(r"^row_(\d+)$")
_LEADING_INT = re.compile(r"^\s*(\d+)")
_PLAIN_SHEET_NAME = re.compile(r"^[A-Za-z0-9_]+$")


def row_number_from_id(record_id: str) -> int:
    """``row_7`` -> 7. Raises ValueError for anything else."""
    match = _ROW_ID.match(record_id or "")
    if not match or int(match.group(1)) < 2:
        raise ValueError(f"Not a sheet record id: {record_id!r}")
    return int(match.group(1))


def parse_count(value: str, default: int) -> int:
    """Leading integer of a cell (``"2 adults"`` -> 2), default when absent."""
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else default


def parse_attachment_refs(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in (value or "").split(",") if part.strip())


def _submission_order(record: GuestRecord) -> tuple:
    if record.submitted_at is None:
        return (1, record.row_number)
    return (0, record.submitted_at, record.row_number)


class SheetsRecordStore(IRecordStore):
    """
    Record store over one worksheet of a Google spreadsheet.

    Header spellings are resolved through the field alias table. Status
    writes touch only the Status, Processing Notes and Last Processed
    cells of the record's row.
    """

    def __init__(
        self,
        client: ISheetValuesClient,
        sheet_name: str = "Guests",
        aliases: Sequence[FieldAlias] = GUEST_FIELD_ALIASES,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = client
        self._sheet_name = sheet_name
        self._aliases = aliases
        self._clock = clock
        self._columns: Optional[ColumnMap] = None

    @property
    def sheet_ref(self) -> str:
        """Sheet name as it appears in A1 notation."""
        if _PLAIN_SHEET_NAME.match(self._sheet_name):
            return self._sheet_name
        escaped = self._sheet_name.replace("'", "''")
        return f"'{escaped}'"

    async def list_pending(self) -> list[GuestRecord]:
        try:
            rows = await self._client.get_values(self.sheet_ref)
        except Exception as exc:
            raise RecordStoreUnavailableError(f"Could not read sheet {self._sheet_name}: {exc}") from exc

        if len(rows) <= 1:
            logger.info("No guest data found in sheet")
            return []

        self._columns = ColumnMap.resolve(rows[0], self._aliases)
        if not self._columns.has("status"):
            logger.warning(f"Sheet {self._sheet_name} has no Status column, every row counts as New")

        pending: list[GuestRecord] = []
        for row_number, row in enumerate(rows[1:], start=2):
            if not any(str(cell).strip() for cell in row):
                continue
            try:
                record = self._parse_row(self._columns, row, row_number)
            except ValueError as exc:
                logger.warning(f"Skipping row {row_number}: {exc}")
                continue
            if record.status is not RecordStatus.NEW:
                continue
            try:
                record.validate()
            except ValidationError as exc:
                logger.warning(f"Incomplete guest data in row {row_number}: {exc}")
                continue
            pending.append(record)

        pending.sort(key=_submission_order)
        logger.info(f"Retrieved {len(pending)} new guests from sheet {self._sheet_name}")
        return pending

    async def get_record(self, record_id: str) -> Optional[GuestRecord]:
        """Read one record by id, whatever its status. None if the row is empty."""
        row_number = row_number_from_id(record_id)
        try:
            columns = await self._ensure_columns()
            rows = await self._client.get_values(f"{self.sheet_ref}!{row_number}:{row_number}")
        except Exception as exc:
            raise RecordStoreUnavailableError(f"Could not read {record_id}: {exc}") from exc

        if not rows or not any(str(cell).strip() for cell in rows[0]):
            return None
        return self._parse_row(columns, rows[0], row_number)

    async def update_status(
        self, record_id: str, status: RecordStatus, notes: str = ""
    ) -> None:
        if status is RecordStatus.NEW:
            raise ValueError("Status New is never written back to the record store")

        try:
            row_number = row_number_from_id(record_id)
            columns = await self._ensure_columns()
        except Exception as exc:
            raise PersistenceError(record_id, str(exc)) from exc
        if not columns.has("status"):
            raise PersistenceError(record_id, f"sheet {self._sheet_name} has no Status column")

        data = [self._cell(columns, "status", row_number, status.value)]
        if notes and columns.has("processing_notes"):
            data.append(self._cell(columns, "processing_notes", row_number, notes))
        if columns.has("last_processed"):
            data.append(
                self._cell(columns, "last_processed", row_number, self._clock().isoformat())
            )

        try:
            await self._client.batch_update(data)
        except Exception as exc:
            raise PersistenceError(record_id, str(exc)) from exc
        logger.info(f"Updated status for guest {record_id} to {status.value}")

    async def update_sync_flags(
        self,
        record_id: str,
        portal_synced: Optional[bool] = None,
        downstream_synced: Optional[bool] = None,
    ) -> None:
        try:
            row_number = row_number_from_id(record_id)
            columns = await self._ensure_columns()
        except Exception as exc:
            raise PersistenceError(record_id, str(exc)) from exc

        data = []
        for field, flag in (("portal_synced", portal_synced), ("downstream_synced", downstream_synced)):
            if flag is None:
                continue
            if not columns.has(field):
                logger.debug(f"No {field} column in sheet {self._sheet_name}, skipping")
                continue
            data.append(self._cell(columns, field, row_number, "TRUE" if flag else "FALSE"))
        if not data:
            return

        try:
            await self._client.batch_update(data)
        except Exception as exc:
            raise PersistenceError(record_id, str(exc)) from exc
        logger.info(f"Updated sync flags for guest {record_id}")

    async def _ensure_columns(self) -> ColumnMap:
        if self._columns is None:
            rows = await self._client.get_values(f"{self.sheet_ref}!1:1")
            self._columns = ColumnMap.resolve(rows[0] if rows else [], self._aliases)
        return self._columns

    def _cell(self, columns: ColumnMap, field: str, row_number: int, value: Any) -> dict[str, Any]:
        return {
            "range": f"{self.sheet_ref}!{columns.letter_of(field)}{row_number}",
            "values": [[value]],
        }

    def _parse_row(self, columns: ColumnMap, row: Sequence[str], row_number: int) -> GuestRecord:
        def value(field: str, default: str = "") -> str:
            return columns.value(row, field, default)

        nationality = value("nationality")
        return GuestRecord(
            id=f"row_{row_number}",
            row_number=row_number,
            first_name=value("first_name"),
            last_name=value("last_name"),
            passport_number=value("passport_number"),
            email=value("email"),
            phone=value("phone"),
            nationality=nationality,
            nationality_code=value("nationality_code") or nationality_code_for(nationality),
            passport_expiry=value("passport_expiry"),
            check_in_date=value("check_in_date"),
            check_in_time=value("check_in_time", DEFAULT_CHECK_IN_TIME),
            check_out_date=value("check_out_date"),
            check_out_time=value("check_out_time", DEFAULT_CHECK_OUT_TIME),
            total_guests=parse_count(value("total_guests"), 1),
            children=parse_count(value("children"), 0),
            property_number=value("property_number"),
            attachment_refs=parse_attachment_refs(value("attachment_refs")),
            status=RecordStatus.parse(value("status")),
            processing_notes=value("processing_notes"),
            last_processed_at=parse_datetime(value("last_processed")),
            submitted_at=parse_datetime(value("timestamp")),
        )
