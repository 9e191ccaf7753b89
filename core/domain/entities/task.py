"""
Task aggregate.

A task owns exactly one workflow: an ordered list of steps whose
``depends_on`` lists form a DAG. Steps are never shared across tasks.

CRITICAL: This file must contain ZERO imports from:
- pydantic
- fastapi
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..enums import StepStatus, TaskStatus
from ..value_objects import AgentRequirements, Budget


@dataclass
class WorkflowStep:
    """
    A single unit of work inside a workflow.

    ``id``, ``name``, ``requirements``, ``input`` and ``depends_on`` are
    definitional; the remaining fields are execution state and are reset
    when the workflow is initialized.
    """
    id: str
    name: str
    requirements: AgentRequirements = field(default_factory=AgentRequirements)
    input: Optional[Dict[str, Any]] = None
    depends_on: List[str] = field(default_factory=list)

    status: StepStatus = StepStatus.PENDING
    output: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    assigned_agent: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


@dataclass
class Workflow:
    """Ordered sequence of steps belonging to one task."""
    steps: List[WorkflowStep] = field(default_factory=list)

    def get_step(self, step_id: str) -> Optional[WorkflowStep]:
        """Return the step with the given id, or None."""
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def step_ids(self) -> List[str]:
        return [step.id for step in self.steps]

    def steps_with_status(self, *statuses: StepStatus) -> List[WorkflowStep]:
        return [step for step in self.steps if step.status in statuses]


@dataclass
class Task:
    """
    Task aggregate root.

    Status moves CREATED -> RUNNING -> COMPLETED | FAILED | CANCELED.
    RUNNING is entered at most once and terminal states are final.
    ``result`` only ever holds outputs of COMPLETED steps.
    """
    id: str
    name: str
    description: str
    creator: str
    workflow: Workflow
    status: TaskStatus = TaskStatus.CREATED
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    budget: Optional[Budget] = None
    deadline: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
