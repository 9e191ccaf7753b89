"""Orchestrator - task lifecycle and the re-entrant dispatch loop."""

import asyncio
import uuid
from collections.abc import Coroutine
from copy import deepcopy
from datetime import datetime, timezone
from typing import Any

from core.domain.directory import AgentDirectory
from core.domain.entities import Task, Workflow, WorkflowStep
from core.domain.enums import StepStatus, TaskStatus
from core.domain.errors import NotFoundError, StateError, ValidationError
from core.infrastructure.logging import get_logger
from core.utils.datetime import elapsed_ms, utc_now

from . import events as ev
from .bus import EventBusProtocol, InMemoryEventBus
from .decision import DecisionEngine, SelectionContext
from .dispatch import InMemoryStepDispatcher, StepDispatcher
from .events import Event, EventMetadata
from .models import (
    CreateTaskRequest,
    StepAssignment,
    StepResult,
    TaskExecution,
    TaskExecutionResult,
)
from .selector import AgentSelector, RankedAgentSelector
from .store import InMemoryTaskStore
from .workflow import WorkflowEngine

NO_AGENT_AVAILABLE = "No agent available"
DEFAULT_MAX_STEPS_PER_TASK = 50


class Orchestrator:
    """Single scheduling authority over an in-memory task set.

    ``execute`` and ``submit_step_result`` are the only entry points into
    the dispatch loop. Every loop pass and every result runs under the
    task's lock, so overlapping passes cannot dispatch a step twice.
    """

    def __init__(
        self,
        directory: AgentDirectory,
        selector: AgentSelector | None = None,
        decision_engine: DecisionEngine | None = None,
        dispatcher: StepDispatcher | None = None,
        event_bus: EventBusProtocol | None = None,
        workflow_engine: WorkflowEngine | None = None,
        store: InMemoryTaskStore | None = None,
        max_steps_per_task: int = DEFAULT_MAX_STEPS_PER_TASK,
    ) -> None:
        """Initialize orchestrator.

        Args:
            directory: Agent directory to select workers from
            selector: Selection policy (ranked over ``decision_engine`` by default)
            decision_engine: Receives every step outcome
            dispatcher: Hands assigned steps to workers
            event_bus: Receives lifecycle events
            workflow_engine: Validation and step state machine
            store: Task set with per-task locking
            max_steps_per_task: Upper bound on workflow length
        """
        self._directory = directory
        self._decision_engine = decision_engine or DecisionEngine()
        self._selector = selector or RankedAgentSelector(self._decision_engine)
        self._dispatcher = dispatcher or InMemoryStepDispatcher()
        self._event_bus = event_bus or InMemoryEventBus()
        self._workflow_engine = workflow_engine or WorkflowEngine()
        self._store = store or InMemoryTaskStore()
        self._max_steps_per_task = max_steps_per_task
        self._background: set[asyncio.Task] = set()
        self._logger = get_logger("orchestration.orchestrator")

    @property
    def decision_engine(self) -> DecisionEngine:
        return self._decision_engine

    @property
    def dispatcher(self) -> StepDispatcher:
        return self._dispatcher

    # ------------------------------------------------------------------
    # Task lifecycle
    # ------------------------------------------------------------------

    async def create_task(self, request: CreateTaskRequest) -> Task:
        """Validate and initialize a workflow, then store a CREATED task.

        Raises:
            ValidationError: If the workflow is empty, too long or invalid
        """
        steps = request.workflow.steps
        if not steps:
            raise ValidationError("Workflow must contain at least one step")
        if len(steps) > self._max_steps_per_task:
            raise ValidationError(
                f"Workflow has {len(steps)} steps, limit is {self._max_steps_per_task}"
            )
        if not self._workflow_engine.validate(request.workflow):
            reason = self._workflow_engine.explain(request.workflow)
            raise ValidationError(f"Invalid workflow: {reason}")

        deadline = request.deadline
        if deadline is not None and deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=timezone.utc)

        now = utc_now()
        task = Task(
            id=str(uuid.uuid4()),
            name=request.name,
            description=request.description,
            creator=request.creator,
            workflow=self._workflow_engine.initialize(request.workflow),
            status=TaskStatus.CREATED,
            budget=request.budget,
            deadline=deadline,
            created_at=now,
            updated_at=now,
        )
        self._store.add(task)

        self._logger.info(f"Task created: {task.id} ({task.name}, {len(steps)} steps)")
        await self._publish(
            [self._event(ev.TASK_CREATED, task.id, {"name": task.name, "step_count": len(steps)})]
        )
        return deepcopy(task)

    async def get_task(self, task_id: str) -> Task:
        """Snapshot of a task.

        Raises:
            NotFoundError: If the task does not exist
        """
        task = self._store.snapshot(task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    async def list_tasks(
        self, creator: str | None = None, status: TaskStatus | None = None
    ) -> list[Task]:
        """Snapshots of tasks filtered by creator and/or status."""
        return [
            deepcopy(task)
            for task in self._store.all()
            if (creator is None or task.creator == creator)
            and (status is None or task.status == status)
        ]

    async def get_execution(self, task_id: str) -> TaskExecution:
        """Snapshot of a task's execution record.

        Raises:
            NotFoundError: If the task does not exist or was never executed
        """
        if self._store.get(task_id) is None:
            raise NotFoundError("Task", task_id)
        execution = self._store.execution_snapshot(task_id)
        if execution is None:
            raise NotFoundError("Execution", task_id)
        return execution

    async def execute(self, task_id: str) -> TaskExecutionResult:
        """Move a CREATED task to RUNNING and start the dispatch loop.

        Returns immediately; the loop runs in the background.

        Raises:
            NotFoundError: If the task does not exist
        """
        async with self._store.locked(task_id):
            task = self._store.get(task_id)
            if task is None:
                raise NotFoundError("Task", task_id)

            if task.status != TaskStatus.CREATED:
                reason = (
                    "Task is already running"
                    if task.status == TaskStatus.RUNNING
                    else f"Task is already {task.status.value.lower()}"
                )
                self._logger.warning(f"Execute rejected for task {task_id}: {reason}")
                return TaskExecutionResult(task=deepcopy(task), ok=False, error=StateError(reason))

            now = utc_now()
            task.status = TaskStatus.RUNNING
            task.started_at = now
            task.updated_at = now
            self._store.put_execution(
                TaskExecution(task_id=task_id, started_at=now, last_updated=now)
            )
            snapshot = deepcopy(task)

        self._logger.info(f"Task started: {task_id}")
        await self._publish([self._event(ev.TASK_STARTED, task_id, {"name": snapshot.name})])
        self._schedule(task_id)
        return TaskExecutionResult(task=snapshot, ok=True)

    async def cancel(self, task_id: str) -> bool:
        """Cancel a RUNNING task.

        In-flight steps are not aborted; their late results are absorbed.

        Returns:
            True if canceled, False if the task was not RUNNING

        Raises:
            NotFoundError: If the task does not exist
        """
        async with self._store.locked(task_id):
            task = self._store.get(task_id)
            if task is None:
                raise NotFoundError("Task", task_id)
            if task.status != TaskStatus.RUNNING:
                self._logger.warning(
                    f"Cancel rejected for task {task_id}: status is {task.status.value}"
                )
                return False

            in_flight = self._in_flight_ids(task)
            now = utc_now()
            task.status = TaskStatus.CANCELED
            task.updated_at = now
            task.completed_at = now

        self._release(task_id, in_flight)
        self._logger.info(f"Task canceled: {task_id}")
        await self._publish([self._event(ev.TASK_CANCELED, task_id, {})])
        return True

    async def submit_step_result(self, result: StepResult) -> bool:
        """Accept a worker's result for a dispatched step.

        Returns:
            True if the result was applied, False for duplicates or steps
            that were never dispatched

        Raises:
            NotFoundError: If the task or step does not exist
            StateError: If the task was never executed
        """
        task_id, step_id = result.task_id, result.step_id
        events: list[Event] = []

        async with self._store.locked(task_id):
            task = self._store.get(task_id)
            if task is None:
                raise NotFoundError("Task", task_id)
            execution = self._store.get_execution(task_id)
            if execution is None:
                raise StateError(f"Task {task_id} has not been executed")
            step = task.workflow.get_step(step_id)
            if step is None:
                raise NotFoundError("Step", step_id)

            already_reported = (
                step_id in execution.completed_step_ids or step_id in execution.failed_step_ids
            )
            if already_reported or not step.status.is_in_flight:
                self._logger.warning(
                    f"Ignoring result for step {step_id} of task {task_id}: "
                    f"step is {step.status.value}"
                )
                return False

            now = utc_now()
            if result.success:
                execution.mark_completed(step_id, now)
            else:
                execution.mark_failed(step_id, now)
            self._record_outcome(task_id, step, result.success, now)

            running = task.status == TaskStatus.RUNNING
            if not running:
                self._logger.info(
                    f"Late result for step {step_id} of {task.status.value.lower()} task "
                    f"{task_id} recorded without effect"
                )
            elif result.success:
                task.workflow = self._workflow_engine.set_step_status(
                    task.workflow, step_id, StepStatus.COMPLETED, output=result.output
                )
                events.append(self._event(ev.STEP_COMPLETED, task_id, {"agent_id": step.assigned_agent}, step_id))
                self._logger.info(f"Step completed: {step_id} (task {task_id})")
            else:
                error = result.error or "Step failed"
                task.workflow = self._workflow_engine.set_step_status(
                    task.workflow, step_id, StepStatus.FAILED, error=error
                )
                events.append(self._event(ev.STEP_FAILED, task_id, {"error": error}, step_id))
                self._logger.warning(f"Step failed: {step_id} (task {task_id}): {error}")
            if running:
                task.updated_at = now

        self._release(task_id, [step_id])
        if not running:
            return True

        await self._publish(events)
        await self._process_task(task_id)
        return True

    async def wait_idle(self) -> None:
        """Wait until no loop pass or dispatch is running in the background."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ------------------------------------------------------------------
    # Dispatch loop
    # ------------------------------------------------------------------

    def _schedule(self, task_id: str) -> None:
        self._spawn(self._process_task(task_id))

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        job = asyncio.create_task(coro)
        self._background.add(job)
        job.add_done_callback(self._background.discard)

    async def _process_task(self, task_id: str) -> None:
        try:
            await self._run_pass(task_id)
        except Exception as exc:
            self._logger.error(f"Dispatch loop failed for task {task_id}: {exc}", exc_info=True)
            await self._abort(task_id, f"Internal error while processing task: {exc}")

    async def _run_pass(self, task_id: str) -> None:
        events: list[Event] = []
        assignments: list[StepAssignment] = []
        reschedule = False
        settled: list[str] = []

        async with self._store.locked(task_id):
            task = self._store.get(task_id)
            execution = self._store.get_execution(task_id)
            if task is None or execution is None or task.status != TaskStatus.RUNNING:
                return

            if self._workflow_engine.is_complete(task.workflow):
                self._finalize(task, events)
            else:
                ready = self._workflow_engine.next_ready_steps(
                    task.workflow, execution.completed_step_ids
                )
                if not ready:
                    self._check_starvation(task, events)

                for step in ready:
                    agent_id, reason = await self._select(task, step)
                    now = utc_now()
                    if agent_id is None:
                        task.workflow = self._workflow_engine.set_step_status(
                            task.workflow, step.id, StepStatus.FAILED, error=reason
                        )
                        execution.mark_failed(step.id, now)
                        events.append(self._event(ev.STEP_FAILED, task_id, {"error": reason}, step.id))
                        self._logger.warning(f"Step failed: {step.id} (task {task_id}): {reason}")
                        reschedule = True
                        continue

                    task.workflow = self._workflow_engine.set_step_status(
                        task.workflow, step.id, StepStatus.ASSIGNED, assigned_agent=agent_id
                    )
                    execution.current_step_id = step.id
                    execution.last_updated = now
                    assignments.append(
                        StepAssignment(
                            task_id=task_id,
                            step_id=step.id,
                            step_name=step.name,
                            agent_id=agent_id,
                            requirements=step.requirements,
                            input=deepcopy(step.input),
                        )
                    )
                    events.append(
                        self._event(ev.STEP_ASSIGNED, task_id, {"agent_id": agent_id}, step.id)
                    )
                    self._logger.info(f"Step assigned: {step.id} -> agent {agent_id} (task {task_id})")
                task.updated_at = utc_now()
            if task.status != TaskStatus.RUNNING:
                settled = self._in_flight_ids(task)

        self._release(task_id, settled)
        await self._publish(events)
        for assignment in assignments:
            self._spawn(self._dispatch_step(assignment))
        if reschedule:
            self._schedule(task_id)

    async def _select(self, task: Task, step: WorkflowStep) -> tuple[str | None, str]:
        context = SelectionContext(
            required_capabilities=step.requirements.capabilities,
            required_networks=step.requirements.networks,
            task_id=task.id,
            step_id=step.id,
            deadline=task.deadline,
            budget=task.budget,
        )
        try:
            agent_id = await self._selector.select_agent(step, self._directory, context)
        except Exception as exc:
            self._logger.error(f"Agent selection failed for step {step.id}: {exc}", exc_info=True)
            return None, f"Agent selection failed: {exc}"
        return agent_id, NO_AGENT_AVAILABLE

    async def _dispatch_step(self, assignment: StepAssignment) -> None:
        async with self._store.locked(assignment.task_id):
            task = self._store.get(assignment.task_id)
            if task is None or task.status != TaskStatus.RUNNING:
                return
            step = task.workflow.get_step(assignment.step_id)
            if step is None or step.status != StepStatus.ASSIGNED:
                return
            task.workflow = self._workflow_engine.set_step_status(
                task.workflow, assignment.step_id, StepStatus.RUNNING
            )
            task.updated_at = utc_now()

        self._logger.info(
            f"Step dispatched: {assignment.step_id} -> agent {assignment.agent_id} "
            f"(task {assignment.task_id})"
        )
        try:
            await self._dispatcher.dispatch(assignment, self.submit_step_result)
        except Exception as exc:
            self._logger.error(
                f"Dispatch of step {assignment.step_id} to agent {assignment.agent_id} failed: {exc}",
                exc_info=True,
            )
            await self.submit_step_result(
                StepResult(
                    task_id=assignment.task_id,
                    step_id=assignment.step_id,
                    success=False,
                    error=f"Dispatch to agent {assignment.agent_id} failed: {exc}",
                )
            )
            return

        task = self._store.get(assignment.task_id)
        if task is not None and task.status != TaskStatus.RUNNING:
            self._release(assignment.task_id, [assignment.step_id])

    @staticmethod
    def _in_flight_ids(task: Task) -> list[str]:
        return [
            step.id
            for step in task.workflow.steps_with_status(StepStatus.ASSIGNED, StepStatus.RUNNING)
        ]

    def _release(self, task_id: str, step_ids: list[str]) -> None:
        for step_id in step_ids:
            try:
                self._dispatcher.release(task_id, step_id)
            except Exception as exc:
                self._logger.error(
                    f"Releasing step {step_id} of task {task_id} failed: {exc}", exc_info=True
                )

    def _check_starvation(self, task: Task, events: list[Event]) -> None:
        pending = task.workflow.steps_with_status(StepStatus.PENDING)
        if not pending:
            return

        blocking = task.workflow.steps_with_status(StepStatus.FAILED, StepStatus.SKIPPED)
        in_flight = task.workflow.steps_with_status(StepStatus.ASSIGNED, StepStatus.RUNNING)
        if blocking:
            ids = ", ".join(step.id for step in blocking)
            self._fail_task(task, f"Task failed due to failed steps: {ids}", events)
        elif not in_flight:
            ids = ", ".join(step.id for step in pending)
            self._fail_task(task, f"Workflow cannot make progress, steps never ready: {ids}", events)

    def _finalize(self, task: Task, events: list[Event]) -> None:
        failed = task.workflow.steps_with_status(StepStatus.FAILED)
        now = utc_now()
        task.result = self._collect_result(task.workflow)
        task.completed_at = now
        task.updated_at = now

        if failed:
            ids = ", ".join(step.id for step in failed)
            task.status = TaskStatus.FAILED
            task.error = f"Task failed due to {len(failed)} failed step(s): {ids}"
            events.append(self._event(ev.TASK_FAILED, task.id, {"error": task.error}))
            self._logger.warning(f"Task failed: {task.id}: {task.error}")
        else:
            task.status = TaskStatus.COMPLETED
            task.error = None
            events.append(self._event(ev.TASK_COMPLETED, task.id, {"step_count": len(task.workflow.steps)}))
            self._logger.info(f"Task completed: {task.id}")

    def _fail_task(self, task: Task, reason: str, events: list[Event]) -> None:
        now = utc_now()
        task.status = TaskStatus.FAILED
        task.error = reason
        task.result = self._collect_result(task.workflow)
        task.completed_at = now
        task.updated_at = now
        events.append(self._event(ev.TASK_FAILED, task.id, {"error": reason}))
        self._logger.warning(f"Task failed: {task.id}: {reason}")

    async def _abort(self, task_id: str, reason: str) -> None:
        events: list[Event] = []
        async with self._store.locked(task_id):
            task = self._store.get(task_id)
            if task is None or task.status != TaskStatus.RUNNING:
                return
            self._fail_task(task, reason, events)
            settled = self._in_flight_ids(task)
        self._release(task_id, settled)
        await self._publish(events)

    @staticmethod
    def _collect_result(workflow: Workflow) -> dict[str, Any]:
        return {
            step.id: deepcopy(step.output)
            for step in workflow.steps
            if step.status == StepStatus.COMPLETED
        }

    def _record_outcome(
        self, task_id: str, step: WorkflowStep, success: bool, now: datetime
    ) -> None:
        if step.assigned_agent is None:
            return
        self._decision_engine.record_outcome(
            agent_id=step.assigned_agent,
            task_id=task_id,
            step_id=step.id,
            success=success,
            execution_time_ms=elapsed_ms(step.start_time or now, now),
        )

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _event(
        self, name: str, task_id: str, payload: dict[str, object], step_id: str | None = None
    ) -> Event:
        return Event(
            name=name,
            payload=payload,
            metadata=EventMetadata(task_id=task_id, timestamp=utc_now(), step_id=step_id),
        )

    async def _publish(self, events: list[Event]) -> None:
        """Publish events; always called with no task lock held."""
        for event in events:
            await self._event_bus.publish(event)
