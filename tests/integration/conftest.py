"""Pytest configuration and fixtures for API integration tests."""

from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_orchestrator, get_settings
from api.main import app
from core.domain.value_objects import PortalCredentials
from core.infrastructure.locking import InProcessRunLock
from core.infrastructure.staging import FileStager
from core.settings import (
    AppSettings,
    DatabaseSettings,
    PipelineSettings,
    PortalSettings,
    SheetsSettings,
)
from orchestration import Orchestrator, PortalEngineFactory, RetryPolicy
from tests.mocks.fake_session_driver import FakeSessionDriver
from tests.mocks.guests import make_guest
from tests.mocks.in_memory_record_store import InMemoryRecordStore


@dataclass
class ApiContext:
    client: TestClient
    orchestrator: Orchestrator
    store: InMemoryRecordStore
    run_lock: InProcessRunLock


def _settings(**portal) -> AppSettings:
    return AppSettings(
        sheets=SheetsSettings(_env_file=None, spreadsheet_id="sheet-123"),
        portal=PortalSettings(_env_file=None, **portal),
        pipeline=PipelineSettings(_env_file=None),
        database=DatabaseSettings(_env_file=None),
    )


@pytest.fixture
def api(tmp_path) -> ApiContext:
    """Test client wired to an orchestrator over in-memory fakes."""
    store = InMemoryRecordStore(
        [make_guest("row_2"), make_guest("row_3", first_name="Ben", minutes=1)]
    )
    run_lock = InProcessRunLock()
    orchestrator = Orchestrator(
        record_store=store,
        file_stager=FileStager(tmp_path / "staging"),
        engine_factory=PortalEngineFactory(
            driver_factory=FakeSessionDriver,
            credentials=PortalCredentials(email="ops@example.com", password="secret"),
            context_id="3005",
            step_timeout=1.0,
            confirmation_timeout=0.5,
        ),
        run_lock=run_lock,
        retry_policy=RetryPolicy(max_attempts=1, base_delay_seconds=0.0),
    )
    settings = _settings(email="ops@example.com", password="secret")

    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_settings] = lambda: settings

    yield ApiContext(
        client=TestClient(app),
        orchestrator=orchestrator,
        store=store,
        run_lock=run_lock,
    )

    app.dependency_overrides.clear()


@pytest.fixture
def unconfigured_settings() -> AppSettings:
    return AppSettings(
        sheets=SheetsSettings(_env_file=None, spreadsheet_id=""),
        portal=PortalSettings(_env_file=None, email="", password=""),
        pipeline=PipelineSettings(_env_file=None),
        database=DatabaseSettings(_env_file=None),
    )
