"""Domain enums."""

from .status import AgentStatus, StepStatus, TaskStatus

__all__ = ["AgentStatus", "StepStatus", "TaskStatus"]
