"""Tests for the guest pipeline CLI."""

import json

import pytest

from core.domain import RecordStatus
from core.infrastructure.staging import FileStager
from scripts.guest_pipeline import build_parser, purge_record
from tests.mocks.guests import make_guest
from tests.mocks.in_memory_record_store import InMemoryRecordStore


def retained_files(stager: FileStager, record_id: str, count: int = 2) -> None:
    record_dir = stager.record_dir(record_id)
    record_dir.mkdir(parents=True)
    for index in range(count):
        (record_dir / f"scan-{index}.pdf").write_bytes(b"%PDF")


def test_parser_accepts_purge_with_force():
    args = build_parser().parse_args(["purge", "row_5", "--force"])

    assert args.command == "purge"
    assert args.record_id == "row_5"
    assert args.force is True


@pytest.mark.asyncio
async def test_purge_removes_files_of_failed_record(tmp_path, capsys):
    stager = FileStager(tmp_path / "staging")
    store = InMemoryRecordStore([make_guest("row_5", status=RecordStatus.FAILED)])
    retained_files(stager, "row_5")

    code = await purge_record(store, stager, "row_5")

    assert code == 0
    assert not stager.record_dir("row_5").exists()
    assert json.loads(capsys.readouterr().out) == {"record_id": "row_5", "removed": 2}


@pytest.mark.asyncio
async def test_purge_refuses_record_still_processing(tmp_path):
    stager = FileStager(tmp_path / "staging")
    store = InMemoryRecordStore([make_guest("row_5", status=RecordStatus.PROCESSING)])
    retained_files(stager, "row_5")

    assert await purge_record(store, stager, "row_5") == 1
    assert stager.record_dir("row_5").exists()

    assert await purge_record(store, stager, "row_5", force=True) == 0
    assert not stager.record_dir("row_5").exists()


@pytest.mark.asyncio
async def test_purge_of_unknown_record_still_cleans_up(tmp_path):
    stager = FileStager(tmp_path / "staging")
    retained_files(stager, "row_9", count=1)

    assert await purge_record(InMemoryRecordStore([]), stager, "row_9") == 0
    assert not stager.record_dir("row_9").exists()


@pytest.mark.asyncio
async def test_purge_fails_when_store_is_unreachable(tmp_path):
    stager = FileStager(tmp_path / "staging")
    store = InMemoryRecordStore([])
    store.unavailable = True
    retained_files(stager, "row_5", count=1)

    assert await purge_record(store, stager, "row_5") == 1
    assert stager.record_dir("row_5").exists()
