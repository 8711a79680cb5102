"""Tests for InMemoryEventBus."""

from datetime import datetime, timezone

import pytest

from orchestration.bus import ALL_EVENTS, InMemoryEventBus
from orchestration.events import RECORD_FAILED, RUN_FINISHED, RUN_STARTED, Event, EventMetadata


def make_event(name: str = RUN_STARTED, payload: dict | None = None) -> Event:
    metadata = EventMetadata(
        run_id="run-test-123",
        service="test",
        timestamp=datetime.now(timezone.utc),
    )
    return Event(name=name, payload=payload or {}, metadata=metadata)


class Recorder:
    def __init__(self) -> None:
        self.events: list[Event] = []

    async def __call__(self, event: Event) -> None:
        self.events.append(event)

    @property
    def names(self) -> list[str]:
        return [event.name for event in self.events]


@pytest.mark.asyncio
async def test_handler_receives_event_with_metadata():
    bus = InMemoryEventBus()
    recorder = Recorder()

    bus.subscribe(RUN_STARTED, recorder)
    await bus.publish(make_event(payload={"pending": 2}))

    [event] = recorder.events
    assert event.payload == {"pending": 2}
    assert event.metadata.run_id == "run-test-123"
    assert event.metadata.service == "test"


@pytest.mark.asyncio
async def test_only_matching_handlers_run():
    bus = InMemoryEventBus()
    started, finished = Recorder(), Recorder()
    bus.subscribe(RUN_STARTED, started)
    bus.subscribe(RUN_FINISHED, finished)

    await bus.publish(make_event(RUN_FINISHED))

    assert started.events == []
    assert finished.names == [RUN_FINISHED]


@pytest.mark.asyncio
async def test_wildcard_handler_sees_every_event_after_named_handlers():
    bus = InMemoryEventBus()
    order: list[str] = []

    async def everything(event: Event) -> None:
        order.append(f"all:{event.name}")

    async def started(event: Event) -> None:
        order.append(f"named:{event.name}")

    bus.subscribe(ALL_EVENTS, everything)
    bus.subscribe(RUN_STARTED, started)

    await bus.publish(make_event(RUN_STARTED))
    await bus.publish(make_event(RECORD_FAILED))

    assert order == ["named:run.started", "all:run.started", "all:record.failed"]


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery():
    bus = InMemoryEventBus()
    recorder = Recorder()
    bus.subscribe(RUN_STARTED, recorder)

    assert bus.unsubscribe(RUN_STARTED, recorder) is True
    assert bus.unsubscribe(RUN_STARTED, recorder) is False
    await bus.publish(make_event())

    assert recorder.events == []


@pytest.mark.asyncio
async def test_handler_failure_does_not_reach_publisher():
    bus = InMemoryEventBus()
    recorder = Recorder()

    async def broken(event: Event) -> None:
        raise RuntimeError("observer crashed")

    bus.subscribe(RUN_STARTED, broken)
    bus.subscribe(RUN_STARTED, recorder)

    await bus.publish(make_event())

    assert recorder.names == [RUN_STARTED]


@pytest.mark.asyncio
async def test_publish_without_handlers_is_a_no_op():
    await InMemoryEventBus().publish(make_event())
