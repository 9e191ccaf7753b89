"""
Status Enums.

Lifecycle status values for tasks, workflow steps and agents.
"""
from enum import Enum


class TaskStatus(str, Enum):
    """Task lifecycle status values."""

    CREATED = "CREATED"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELED = "CANCELED"

    @property
    def is_terminal(self) -> bool:
        """COMPLETED, FAILED and CANCELED are final."""
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.CANCELED)


class StepStatus(str, Enum):
    """Workflow step status values."""

    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"

    @property
    def is_terminal(self) -> bool:
        """A terminal step makes no further progress."""
        return self in (StepStatus.COMPLETED, StepStatus.FAILED, StepStatus.SKIPPED)

    @property
    def is_in_flight(self) -> bool:
        """Step has been handed to a worker and awaits its result."""
        return self in (StepStatus.ASSIGNED, StepStatus.RUNNING)


class AgentStatus(str, Enum):
    """Agent availability status values."""

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
