"""Orchestration events - Event, EventMetadata."""

from dataclasses import dataclass
from datetime import datetime

RUN_STARTED = "run.started"
RUN_ABORTED = "run.aborted"
RUN_FINISHED = "run.finished"
RECORD_COMPLETED = "record.completed"
RECORD_FAILED = "record.failed"


@dataclass
class EventMetadata:
    """Metadata for an event."""

    run_id: str
    service: str
    timestamp: datetime


@dataclass
class Event:
    """Lifecycle event emitted by the orchestrator."""

    name: str
    payload: dict[str, object]
    metadata: EventMetadata
