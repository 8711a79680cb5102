"""Event bus for run and record lifecycle events."""

from collections.abc import Awaitable, Callable
from typing import Protocol

from guestflow_sdk.logging import get_logger

from .events import Event

EventHandler = Callable[[Event], Awaitable[None]]

# Subscribing to this name receives every published event.
ALL_EVENTS = "*"


class EventBusProtocol(Protocol):
    """What the orchestrator needs from a bus."""

    async def publish(self, event: Event) -> None:
        ...

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        ...


class InMemoryEventBus(EventBusProtocol):
    """
    Process-local bus.

    Handlers run one after another in subscription order, named handlers
    before ``ALL_EVENTS`` handlers. A failing handler is logged and skipped;
    the publisher never sees the error.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._logger = get_logger("orchestration.event_bus")

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """
        Register handler for event_name.

        Args:
            event_name: Event name, or ALL_EVENTS for every event
            handler: Async callable receiving the event
        """
        self._handlers.setdefault(event_name, []).append(handler)

    def unsubscribe(self, event_name: str, handler: EventHandler) -> bool:
        """Remove one registration; return False if it was not registered."""
        handlers = self._handlers.get(event_name, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def handlers_for(self, event_name: str) -> list[EventHandler]:
        return [*self._handlers.get(event_name, []), *self._handlers.get(ALL_EVENTS, [])]

    async def publish(self, event: Event) -> None:
        handlers = self.handlers_for(event.name)
        if not handlers:
            return

        self._logger.debug(
            f"Publishing {event.name} (run {event.metadata.run_id}) to {len(handlers)} handler(s)"
        )
        for handler in handlers:
            try:
                await handler(event)
            except Exception as exc:
                self._logger.error(
                    f"Handler {handler!r} failed for {event.name}: {exc}",
                    exc_info=True,
                )
