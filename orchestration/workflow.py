"""Workflow engine - validation, readiness and the step state machine."""

from collections.abc import Collection
from dataclasses import replace
from typing import Any

from core.domain.entities import Workflow, WorkflowStep
from core.domain.enums import StepStatus
from core.domain.errors import NotFoundError, StateError
from core.utils.datetime import utc_now


class WorkflowEngine:
    """Stateless operations over a task's workflow.

    Every mutating operation returns a new ``Workflow``; the input is never
    modified in place.
    """

    def explain(self, workflow: Workflow) -> str | None:
        """Describe the first structural problem of a workflow.

        Args:
            workflow: Workflow to check

        Returns:
            Human-readable reason, or None if the workflow is valid
        """
        step_ids = workflow.step_ids()
        seen: set[str] = set()
        for step_id in step_ids:
            if step_id in seen:
                return f"Duplicate step id: {step_id}"
            seen.add(step_id)

        for step in workflow.steps:
            for dep_id in step.depends_on:
                if dep_id not in seen:
                    return f"Step {step.id} depends on unknown step {dep_id}"

        cycle_at = self._find_cycle(workflow)
        if cycle_at is not None:
            return f"Dependency cycle detected at step {cycle_at}"

        return None

    def validate(self, workflow: Workflow) -> bool:
        """Check uniqueness, referential integrity and acyclicity.

        Fails closed: returns False instead of raising.
        """
        try:
            return self.explain(workflow) is None
        except (AttributeError, TypeError):
            return False

    def initialize(self, workflow: Workflow) -> Workflow:
        """Return a copy with every step reset to PENDING.

        Definitional fields are preserved; output, error, assignment and
        timestamps are cleared.

        Raises:
            StateError: If any step is already assigned or running
        """
        in_flight = [step.id for step in workflow.steps if step.status.is_in_flight]
        if in_flight:
            raise StateError(f"Cannot initialize a running workflow (in flight: {', '.join(in_flight)})")

        return Workflow(
            steps=[
                WorkflowStep(
                    id=step.id,
                    name=step.name,
                    requirements=step.requirements,
                    input=step.input,
                    depends_on=list(step.depends_on),
                )
                for step in workflow.steps
            ]
        )

    def next_ready_steps(
        self, workflow: Workflow, completed_step_ids: Collection[str]
    ) -> list[WorkflowStep]:
        """Steps that are PENDING and whose predecessors have all completed.

        Args:
            workflow: Workflow to inspect
            completed_step_ids: Ids of steps known to be completed

        Returns:
            Ready steps in workflow order
        """
        completed = set(completed_step_ids)
        return [
            step
            for step in workflow.steps
            if step.status == StepStatus.PENDING
            and all(dep_id in completed for dep_id in step.depends_on)
        ]

    def is_complete(self, workflow: Workflow) -> bool:
        """True when no further progress is possible (every step terminal)."""
        return all(step.status.is_terminal for step in workflow.steps)

    def set_step_status(
        self,
        workflow: Workflow,
        step_id: str,
        status: StepStatus,
        output: dict[str, Any] | None = None,
        error: str | None = None,
        assigned_agent: str | None = None,
    ) -> Workflow:
        """Return a workflow with one step moved to ``status``.

        ``start_time`` is stamped the first time a step enters RUNNING and
        ``end_time`` whenever it enters a terminal status.

        Raises:
            NotFoundError: If ``step_id`` is not part of the workflow
        """
        if workflow.get_step(step_id) is None:
            raise NotFoundError("Step", step_id)

        now = utc_now()
        steps = []
        for step in workflow.steps:
            if step.id == step_id:
                step = replace(
                    step,
                    status=status,
                    output=output if output is not None else step.output,
                    error=error if error is not None else step.error,
                    assigned_agent=assigned_agent or step.assigned_agent,
                    start_time=(
                        now
                        if status == StepStatus.RUNNING and step.start_time is None
                        else step.start_time
                    ),
                    end_time=now if status.is_terminal else step.end_time,
                )
            steps.append(step)
        return Workflow(steps=steps)

    def _find_cycle(self, workflow: Workflow) -> str | None:
        # Depth-first walk along depends_on; a dependency still on the
        # recursion stack closes a cycle (self-loops included).
        by_id = {step.id: step for step in workflow.steps}
        visited: set[str] = set()
        on_stack: set[str] = set()

        def visit(step_id: str) -> str | None:
            visited.add(step_id)
            on_stack.add(step_id)
            for dep_id in by_id[step_id].depends_on:
                if dep_id in on_stack:
                    return dep_id
                if dep_id not in visited:
                    found = visit(dep_id)
                    if found is not None:
                        return found
            on_stack.discard(step_id)
            return None

        for step_id in by_id:
            if step_id not in visited:
                found = visit(step_id)
                if found is not None:
                    return found
        return None
