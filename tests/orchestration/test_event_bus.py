"""Tests for InMemoryEventBus."""

from datetime import datetime, timezone

import pytest

from orchestration.bus import InMemoryEventBus, matches
from orchestration.events import (
    STEP_ASSIGNED,
    STEP_COMPLETED,
    TASK_COMPLETED,
    TASK_STARTED,
    Event,
    EventMetadata,
)


def _event(name: str = TASK_STARTED, step_id: str | None = None) -> Event:
    return Event(
        name=name,
        payload={"name": "test_task"},
        metadata=EventMetadata(task_id="task-123", timestamp=datetime.now(timezone.utc), step_id=step_id),
    )


class Recorder:
    def __init__(self, label: str, log: list[str]) -> None:
        self.label = label
        self.log = log

    async def __call__(self, event: Event) -> None:
        self.log.append(f"{self.label}:{event.name}")


@pytest.mark.asyncio
async def test_exact_subscription_receives_event():
    bus = InMemoryEventBus()
    received: list[Event] = []

    async def handler(event: Event) -> None:
        received.append(event)

    bus.subscribe(TASK_STARTED, handler)
    await bus.publish(_event())
    await bus.publish(_event(TASK_COMPLETED))

    assert len(received) == 1
    assert received[0].name == "task.started"
    assert received[0].payload == {"name": "test_task"}
    assert received[0].metadata.task_id == "task-123"
    assert received[0].metadata.step_id is None


@pytest.mark.asyncio
async def test_publish_without_subscribers():
    await InMemoryEventBus().publish(_event())


@pytest.mark.parametrize(
    "pattern, event_name, expected",
    [
        ("*", TASK_STARTED, True),
        ("task.step.*", STEP_COMPLETED, True),
        ("task.step.*", TASK_COMPLETED, False),
        ("task.*", STEP_ASSIGNED, True),
        (TASK_COMPLETED, TASK_COMPLETED, True),
        (TASK_COMPLETED, "task.completed.extra", False),
    ],
)
def test_matches(pattern, event_name, expected):
    assert matches(pattern, event_name) is expected


@pytest.mark.asyncio
async def test_delivery_order_is_exact_then_prefix_then_wildcard():
    bus = InMemoryEventBus()
    log: list[str] = []

    bus.subscribe("*", Recorder("all", log))
    bus.subscribe("task.step.*", Recorder("steps", log))
    bus.subscribe(STEP_COMPLETED, Recorder("exact", log))
    bus.subscribe(STEP_COMPLETED, Recorder("exact2", log))

    await bus.publish(_event(STEP_COMPLETED, step_id="a"))
    await bus.publish(_event(TASK_STARTED))

    assert log == [
        "exact:task.step.completed",
        "exact2:task.step.completed",
        "steps:task.step.completed",
        "all:task.step.completed",
        "all:task.started",
    ]


@pytest.mark.parametrize("pattern", ["", "task*", "*.completed", "task.*.*", "**"])
def test_subscribe_rejects_unsupported_patterns(pattern):
    bus = InMemoryEventBus()

    with pytest.raises(ValueError):
        bus.subscribe(pattern, Recorder("x", []))


@pytest.mark.asyncio
async def test_unsubscribe_stops_delivery():
    bus = InMemoryEventBus()
    log: list[str] = []
    steps = Recorder("steps", log)

    bus.subscribe("task.step.*", steps)
    await bus.publish(_event(STEP_ASSIGNED))

    assert bus.unsubscribe("task.step.*", steps) is True
    assert bus.unsubscribe("task.step.*", steps) is False
    assert bus.unsubscribe(TASK_STARTED, steps) is False

    await bus.publish(_event(STEP_COMPLETED))

    assert log == ["steps:task.step.assigned"]
    assert bus.handlers_for(STEP_COMPLETED) == []


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_the_others():
    bus = InMemoryEventBus()
    log: list[str] = []

    async def broken(event: Event) -> None:
        raise RuntimeError("handler exploded")

    bus.subscribe(TASK_STARTED, broken)
    bus.subscribe("*", Recorder("all", log))

    await bus.publish(_event())

    assert log == ["all:task.started"]
