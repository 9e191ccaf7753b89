"""Workflow builders for orchestration tests."""

from core.domain.entities import Workflow, WorkflowStep
from core.domain.value_objects import AgentRequirements


def make_step(step_id: str, *capabilities: str, depends_on=(), networks=(), input=None) -> WorkflowStep:
    return WorkflowStep(
        id=step_id,
        name=f"step {step_id}",
        requirements=AgentRequirements.of(capabilities, networks),
        input=input or {"step": step_id},
        depends_on=list(depends_on),
    )


def make_workflow(*steps: WorkflowStep) -> Workflow:
    return Workflow(steps=list(steps))
