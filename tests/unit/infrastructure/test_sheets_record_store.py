"""Tests for SheetsRecordStore."""

from datetime import datetime, timezone

import pytest

from core.domain import RecordStatus
from core.domain.exceptions import PersistenceError, RecordStoreUnavailableError
from core.infrastructure.record_store import SheetsRecordStore
from core.infrastructure.record_store.sheets_client import SheetsApiError
from tests.mocks.fake_sheet_client import FakeSheetValuesClient
from tests.mocks.guests import HEADERS, sheet_row

FIXED_NOW = datetime(2024, 5, 2, 12, 30, tzinfo=timezone.utc)


def make_store(rows, sheet_name: str = "Guests") -> tuple[SheetsRecordStore, FakeSheetValuesClient]:
    client = FakeSheetValuesClient(rows)
    store = SheetsRecordStore(client, sheet_name=sheet_name, clock=lambda: FIXED_NOW)
    return store, client


@pytest.mark.asyncio
async def test_list_pending_returns_only_valid_new_rows():
    store, _ = make_store(
        [
            HEADERS,
            sheet_row("Ana", "Silva", "P1"),
            sheet_row("", "Lee", "P2"),
            sheet_row("Carl", "Kim", ""),
            sheet_row("Dana", "Ng", "P4", status="Completed"),
            sheet_row("Eve", "Ito", "P5", status="processing"),
            sheet_row("Finn", "Lund", "P6", status="New"),
        ]
    )

    pending = await store.list_pending()

    assert [record.id for record in pending] == ["row_2", "row_7"]
    assert all(record.status is RecordStatus.NEW for record in pending)


@pytest.mark.asyncio
async def test_blank_rows_and_unknown_statuses_are_skipped():
    store, _ = make_store(
        [
            HEADERS,
            [],
            ["", "  ", ""],
            sheet_row("Ana", "Silva", "P1", status="Archived"),
            sheet_row("Ben", "Cho", "P2"),
        ]
    )

    pending = await store.list_pending()

    assert [record.id for record in pending] == ["row_5"]


@pytest.mark.asyncio
async def test_pending_records_are_ordered_by_submission_time():
    store, _ = make_store(
        [
            HEADERS,
            sheet_row("Late", "One", "P1", timestamp="2024-05-03T08:00:00Z"),
            sheet_row("Undated", "Two", "P2", timestamp=""),
            sheet_row("Early", "Three", "P3", timestamp="05/01/2024 07:00:00"),
        ]
    )

    pending = await store.list_pending()

    assert [record.first_name for record in pending] == ["Early", "Late", "Undated"]


@pytest.mark.asyncio
async def test_row_is_mapped_to_a_guest_record():
    store, _ = make_store(
        [
            HEADERS,
            sheet_row("Ana", "Silva", "P1", nationality="Canada", files="https://x/a.pdf, https://x/b.pdf"),
        ]
    )

    [record] = await store.list_pending()

    assert record.id == "row_2"
    assert record.row_number == 2
    assert record.full_name == "Ana Silva"
    assert record.nationality_code == "38"
    assert record.attachment_refs == ("https://x/a.pdf", "https://x/b.pdf")
    assert record.primary_attachment == "https://x/a.pdf"
    assert record.total_guests == 2
    assert record.children == 0
    assert record.check_in_time == "3:00PM"
    assert record.check_out_time == "11:00AM"
    assert record.submitted_at == datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_unknown_nationality_falls_back_to_default_code():
    store, _ = make_store([HEADERS, sheet_row("Ana", "Silva", "P1", nationality="Atlantis")])

    [record] = await store.list_pending()

    assert record.nationality_code == "226"


@pytest.mark.asyncio
async def test_alternate_header_spellings_are_understood():
    store, _ = make_store(
        [
            ["firstName", "lastName", "passportNumber", "nationalityCode", "totalGuests", "checkInTime"],
            ["Ana", "Silva", "P1", "105", "3 adults", "4:00PM"],
        ]
    )

    [record] = await store.list_pending()

    assert record.first_name == "Ana"
    assert record.nationality_code == "105"
    assert record.total_guests == 3
    assert record.check_in_time == "4:00PM"
    assert record.submitted_at is None


@pytest.mark.asyncio
async def test_empty_sheet_has_nothing_pending():
    store, _ = make_store([HEADERS])

    assert await store.list_pending() == []


@pytest.mark.asyncio
async def test_read_failure_raises_store_unavailable():
    store, client = make_store([HEADERS])
    client.read_error = SheetsApiError("Sheets API error: 503", status=503)

    with pytest.raises(RecordStoreUnavailableError):
        await store.list_pending()


@pytest.mark.asyncio
async def test_update_status_writes_status_notes_and_timestamp():
    store, client = make_store([HEADERS, sheet_row("Ana", "Silva", "P1")])
    await store.list_pending()

    await store.update_status("row_2", RecordStatus.FAILED, "Portal submission failed")

    assert client.cell("Status", 2) == "Failed"
    assert client.cell("Processing Notes", 2) == "Portal submission failed"
    assert client.cell("Last Processed", 2) == FIXED_NOW.isoformat()
    assert [update["range"] for update in client.updates] == ["Guests!M2", "Guests!N2", "Guests!O2"]


@pytest.mark.asyncio
async def test_update_status_reads_header_row_when_not_cached():
    store, client = make_store([HEADERS, sheet_row("Ana", "Silva", "P1")])

    await store.update_status("row_2", RecordStatus.PROCESSING, "Started automated processing")

    assert "Guests!1:1" in client.requested_ranges
    assert client.cell("Status", 2) == "Processing"


@pytest.mark.asyncio
async def test_update_status_refuses_new():
    store, _ = make_store([HEADERS, sheet_row("Ana", "Silva", "P1")])

    with pytest.raises(ValueError):
        await store.update_status("row_2", RecordStatus.NEW)


@pytest.mark.asyncio
async def test_update_status_write_failure_is_persistence_error():
    store, client = make_store([HEADERS, sheet_row("Ana", "Silva", "P1")])
    client.write_error = SheetsApiError("Sheets API error: 429", status=429)

    with pytest.raises(PersistenceError) as exc_info:
        await store.update_status("row_2", RecordStatus.COMPLETED, "done")

    assert exc_info.value.record_id == "row_2"


@pytest.mark.asyncio
async def test_update_status_rejects_foreign_ids():
    store, _ = make_store([HEADERS])

    with pytest.raises(PersistenceError):
        await store.update_status("r1", RecordStatus.COMPLETED)


@pytest.mark.asyncio
async def test_update_status_without_status_column():
    store, _ = make_store([["First Name", "Last Name", "Passport Number"], ["Ana", "Silva", "P1"]])

    with pytest.raises(PersistenceError, match="no Status column"):
        await store.update_status("row_2", RecordStatus.COMPLETED)


@pytest.mark.asyncio
async def test_update_sync_flags_writes_only_present_columns():
    store, client = make_store([HEADERS, sheet_row("Ana", "Silva", "P1")])

    await store.update_sync_flags("row_2", portal_synced=True, downstream_synced=True)

    assert client.cell("Sakani Synced", 2) == "TRUE"
    assert [update["range"] for update in client.updates] == ["Guests!P2"]


@pytest.mark.asyncio
async def test_get_record_reads_a_single_row():
    store, _ = make_store(
        [HEADERS, sheet_row("Ana", "Silva", "P1"), sheet_row("Ben", "Cho", "P2", status="Completed")]
    )

    record = await store.get_record("row_3")

    assert record is not None
    assert record.first_name == "Ben"
    assert record.status is RecordStatus.COMPLETED
    assert await store.get_record("row_9") is None


def test_sheet_names_with_spaces_are_quoted():
    store, _ = make_store([HEADERS], sheet_name="Guest List")
    plain, _ = make_store([HEADERS], sheet_name="Guests")

    assert store.sheet_ref == "'Guest List'"
    assert plain.sheet_ref == "Guests"
