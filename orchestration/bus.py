"""Lifecycle event fan-out for the scheduler.

Handlers subscribe to an exact event name (``task.completed``), to a
dotted prefix ending in ``*`` (``task.step.*``), or to ``*`` for every
event. Publishing happens with no task lock held, so handlers may call
back into the orchestrator.
"""

from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Protocol

from core.infrastructure.logging import get_logger

from .events import Event

EventHandler = Callable[[Event], Awaitable[None]]

WILDCARD = "*"


class EventBusProtocol(Protocol):
    async def publish(self, event: Event) -> None:
        ...

    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        ...


def matches(pattern: str, event_name: str) -> bool:
    """Whether a subscription pattern covers an event name."""
    if pattern == WILDCARD:
        return True
    if pattern.endswith(f".{WILDCARD}"):
        return event_name.startswith(pattern[:-1])
    return pattern == event_name


class InMemoryEventBus(EventBusProtocol):
    """Delivers events in-process, in subscription order per pattern.

    Exact-name handlers run first, then prefix handlers, then ``*``
    handlers. A failing handler is logged and the rest still run.
    """

    def __init__(self) -> None:
        self._handlers: defaultdict[str, list[EventHandler]] = defaultdict(list)
        self._logger = get_logger("orchestration.event_bus")

    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        """Register ``handler`` for every event ``pattern`` covers.

        Raises:
            ValueError: If the pattern is empty or has a ``*`` anywhere
                but as the whole pattern or its last dotted segment
        """
        if not pattern:
            raise ValueError("Subscription pattern must not be empty")
        wildcards = pattern.count(WILDCARD)
        if wildcards and pattern != WILDCARD and not (wildcards == 1 and pattern.endswith(f".{WILDCARD}")):
            raise ValueError(f"Unsupported subscription pattern: {pattern}")
        self._handlers[pattern].append(handler)
        self._logger.debug(f"Handler {handler!r} subscribed to {pattern}")

    def unsubscribe(self, pattern: str, handler: EventHandler) -> bool:
        """Remove one registration of ``handler`` under ``pattern``.

        Returns:
            False if it was not registered
        """
        handlers = self._handlers.get(pattern)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        if not handlers:
            del self._handlers[pattern]
        return True

    def handlers_for(self, event_name: str) -> list[EventHandler]:
        exact = list(self._handlers.get(event_name, []))
        prefixed = [
            handler
            for pattern, handlers in self._handlers.items()
            if pattern not in (event_name, WILDCARD) and matches(pattern, event_name)
            for handler in handlers
        ]
        return exact + prefixed + list(self._handlers.get(WILDCARD, []))

    async def publish(self, event: Event) -> None:
        handlers = self.handlers_for(event.name)
        if not handlers:
            return

        self._logger.debug(
            f"Publishing {event.name} for task {event.metadata.task_id} "
            f"to {len(handlers)} handler(s)"
        )

        for handler in handlers:
            try:
                await handler(event)
            except Exception as exc:
                self._logger.error(
                    f"Handler {handler!r} failed for {event.name}: {exc}",
                    exc_info=True,
                )
