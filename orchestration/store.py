"""Task store - tasks and execution records with one lock per task id."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from copy import deepcopy

from core.domain.entities import Task
from core.infrastructure.logging import get_logger

from .models import TaskExecution


class InMemoryTaskStore:
    """In-memory task set.

    All read-modify-write sequences on one task must run inside
    ``locked(task_id)``. Different tasks never share a lock.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._executions: dict[str, TaskExecution] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._logger = get_logger("orchestration.store")

    @asynccontextmanager
    async def locked(self, task_id: str) -> AsyncIterator[None]:
        """Hold the exclusive lock of one task.

        Unknown ids get no lock: tasks are never removed, so the caller's
        lookup inside the block finds nothing either way.
        """
        lock = self._locks.get(task_id)
        if lock is None:
            yield
            return
        async with lock:
            yield

    @property
    def lock_count(self) -> int:
        return len(self._locks)

    def add(self, task: Task) -> None:
        if task.id in self._tasks:
            raise KeyError(f"Task already stored: {task.id}")
        self._tasks[task.id] = task
        self._locks[task.id] = asyncio.Lock()
        self._logger.debug(f"Task stored: {task.id}")

    def get(self, task_id: str) -> Task | None:
        """Live task object; callers must hold the task lock to mutate it."""
        return self._tasks.get(task_id)

    def all(self) -> list[Task]:
        return list(self._tasks.values())

    def get_execution(self, task_id: str) -> TaskExecution | None:
        return self._executions.get(task_id)

    def put_execution(self, execution: TaskExecution) -> None:
        self._executions[execution.task_id] = execution

    def snapshot(self, task_id: str) -> Task | None:
        """Deep copy of a task, safe to hand to collaborators."""
        task = self._tasks.get(task_id)
        return deepcopy(task) if task is not None else None

    def execution_snapshot(self, task_id: str) -> TaskExecution | None:
        execution = self._executions.get(task_id)
        return deepcopy(execution) if execution is not None else None
