"""Orchestration events - Event, EventMetadata and event names."""

from dataclasses import dataclass
from datetime import datetime

TASK_CREATED = "task.created"
TASK_STARTED = "task.started"
TASK_COMPLETED = "task.completed"
TASK_FAILED = "task.failed"
TASK_CANCELED = "task.canceled"
STEP_ASSIGNED = "task.step.assigned"
STEP_COMPLETED = "task.step.completed"
STEP_FAILED = "task.step.failed"


@dataclass
class EventMetadata:
    """Metadata for an event."""

    task_id: str
    timestamp: datetime
    step_id: str | None = None


@dataclass
class Event:
    """Lifecycle event in the orchestration system."""

    name: str
    payload: dict[str, object]
    metadata: EventMetadata
