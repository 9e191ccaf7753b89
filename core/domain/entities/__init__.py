"""Domain entities."""

from .agent import Agent
from .task import Task, Workflow, WorkflowStep

__all__ = ["Agent", "Task", "Workflow", "WorkflowStep"]
