"""Domain layer - pure domain models and interfaces."""

from .directory import AgentDirectory
from .entities import Agent, Task, Workflow, WorkflowStep
from .enums import AgentStatus, StepStatus, TaskStatus
from .matching import capabilities_satisfied, is_eligible, network_compatible
from .errors import (
    DispatchError,
    ErrorKind,
    NotFoundError,
    OrchestrationError,
    StateError,
    ValidationError,
)
from .value_objects import AgentRequirements, Budget

__all__ = [
    "Agent",
    "AgentDirectory",
    "AgentRequirements",
    "AgentStatus",
    "Budget",
    "DispatchError",
    "ErrorKind",
    "NotFoundError",
    "OrchestrationError",
    "StateError",
    "StepStatus",
    "Task",
    "TaskStatus",
    "ValidationError",
    "capabilities_satisfied",
    "is_eligible",
    "network_compatible",
    "Workflow",
    "WorkflowStep",
]
