"""Orchestration models - requests, execution records and dispatch payloads."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from core.domain.entities import Task, Workflow
from core.domain.errors import OrchestrationError
from core.domain.value_objects import AgentRequirements, Budget


@dataclass
class CreateTaskRequest:
    """Everything needed to create a task."""

    name: str
    description: str
    creator: str
    workflow: Workflow
    budget: Budget | None = None
    deadline: datetime | None = None


@dataclass
class TaskExecutionResult:
    """Outcome of asking the orchestrator to execute a task."""

    task: Task
    ok: bool
    error: OrchestrationError | None = None


@dataclass
class TaskExecution:
    """Scheduler scratchpad for one running task.

    Created when the task enters RUNNING and kept after it reaches a
    terminal state for observability. Never handed out without copying.
    """

    task_id: str
    started_at: datetime
    last_updated: datetime
    completed_step_ids: list[str] = field(default_factory=list)
    failed_step_ids: list[str] = field(default_factory=list)
    current_step_id: str | None = None

    def mark_completed(self, step_id: str, now: datetime) -> None:
        if step_id not in self.completed_step_ids:
            self.completed_step_ids.append(step_id)
        self._settle(step_id, now)

    def mark_failed(self, step_id: str, now: datetime) -> None:
        if step_id not in self.failed_step_ids:
            self.failed_step_ids.append(step_id)
        self._settle(step_id, now)

    def _settle(self, step_id: str, now: datetime) -> None:
        if self.current_step_id == step_id:
            self.current_step_id = None
        self.last_updated = now


@dataclass(frozen=True)
class StepAssignment:
    """A step handed to a worker."""

    task_id: str
    step_id: str
    step_name: str
    agent_id: str
    requirements: AgentRequirements
    input: dict[str, Any] | None = None


@dataclass(frozen=True)
class StepResult:
    """Result reported by a worker for one dispatched step."""

    task_id: str
    step_id: str
    success: bool
    output: dict[str, Any] | None = None
    error: str | None = None
