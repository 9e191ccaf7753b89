"""Step dispatchers - hand assigned steps to workers and route results back."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from core.infrastructure.logging import get_logger

from .models import StepAssignment, StepResult

# Completion channel handed to the dispatcher with every assignment
StepReporter = Callable[[StepResult], Awaitable[Any]]

# In-process worker body for ActivityStepDispatcher
StepActivity = Callable[[StepAssignment], Awaitable[dict[str, Any] | None]]


class StepDispatcher(Protocol):
    """Protocol for step dispatch implementations."""

    async def dispatch(self, assignment: StepAssignment, report: StepReporter) -> None:
        """Hand a step to its worker.

        Must return once the hand-off is done; the result arrives later
        through ``report`` (or through the orchestrator's public
        ``submit_step_result``).

        Args:
            assignment: Step and chosen agent
            report: Coroutine to call with the step result

        Raises:
            Exception: If the hand-off itself fails
        """
        ...

    def release(self, task_id: str, step_id: str) -> None:
        """Forget a step once its result is in or its task was canceled."""
        ...


class InMemoryStepDispatcher(StepDispatcher):
    """Queues pending assignments per agent for pull-style workers.

    An assignment stays queued until the orchestrator releases it.
    """

    def __init__(self) -> None:
        self._assignments: dict[str, list[StepAssignment]] = {}
        self._logger = get_logger("orchestration.dispatch")

    async def dispatch(self, assignment: StepAssignment, report: StepReporter) -> None:
        self._assignments.setdefault(assignment.agent_id, []).append(assignment)
        self._logger.info(
            f"Step {assignment.step_id} of task {assignment.task_id} "
            f"queued for agent {assignment.agent_id}"
        )

    def release(self, task_id: str, step_id: str) -> None:
        for agent_id, queued in list(self._assignments.items()):
            remaining = [
                a for a in queued if not (a.task_id == task_id and a.step_id == step_id)
            ]
            if len(remaining) == len(queued):
                continue
            if remaining:
                self._assignments[agent_id] = remaining
            else:
                del self._assignments[agent_id]
            self._logger.debug(f"Step {step_id} of task {task_id} released from agent {agent_id}")

    def assignments_for(self, agent_id: str) -> list[StepAssignment]:
        return list(self._assignments.get(agent_id, []))

    def all_assignments(self) -> list[StepAssignment]:
        return [a for queued in self._assignments.values() for a in queued]

    def clear(self) -> None:
        self._assignments.clear()


class ActivityStepDispatcher(StepDispatcher):
    """Runs each assignment through an async activity as its own asyncio task.

    The activity's return value becomes the step output; an exception
    becomes a failed result carrying the exception message.
    """

    def __init__(self, activity: StepActivity) -> None:
        self._activity = activity
        self._running: set[asyncio.Task] = set()
        self._logger = get_logger("orchestration.dispatch")

    async def dispatch(self, assignment: StepAssignment, report: StepReporter) -> None:
        worker = asyncio.create_task(self._run(assignment, report))
        self._running.add(worker)
        worker.add_done_callback(self._running.discard)

    def release(self, task_id: str, step_id: str) -> None:
        # Activities report on their own; nothing is queued.
        pass

    async def wait_idle(self) -> None:
        """Wait for every in-flight activity to report."""
        while self._running:
            await asyncio.gather(*list(self._running), return_exceptions=True)

    async def _run(self, assignment: StepAssignment, report: StepReporter) -> None:
        try:
            output = await self._activity(assignment)
        except Exception as exc:
            self._logger.warning(
                f"Activity failed for step {assignment.step_id} of task {assignment.task_id}: {exc}"
            )
            result = StepResult(
                task_id=assignment.task_id,
                step_id=assignment.step_id,
                success=False,
                error=str(exc),
            )
        else:
            result = StepResult(
                task_id=assignment.task_id,
                step_id=assignment.step_id,
                success=True,
                output=output,
            )

        try:
            await report(result)
        except Exception as exc:
            self._logger.error(
                f"Reporting result for step {assignment.step_id} failed: {exc}", exc_info=True
            )
