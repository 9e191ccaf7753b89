"""Tests for analytics projections."""

import pytest

from builders import make_step, make_workflow
from core.domain.entities import Agent, Task
from core.domain.enums import AgentStatus, TaskStatus
from orchestration.analytics import compute_system_overview, compute_task_statistics


def _task(task_id: str, status: TaskStatus, steps: int = 1) -> Task:
    return Task(
        id=task_id,
        name=task_id,
        description="",
        creator="alice",
        workflow=make_workflow(*[make_step(f"s{i}") for i in range(steps)]),
        status=status,
    )


def test_task_statistics():
    tasks = [
        _task("t1", TaskStatus.COMPLETED, steps=2),
        _task("t2", TaskStatus.COMPLETED, steps=4),
        _task("t3", TaskStatus.FAILED, steps=3),
        _task("t4", TaskStatus.CANCELED, steps=1),
        _task("t5", TaskStatus.RUNNING, steps=5),
    ]

    stats = compute_task_statistics(tasks)

    assert stats.total == 5
    assert stats.by_status["COMPLETED"] == 2
    assert stats.by_status["CREATED"] == 0
    assert stats.completion_rate == pytest.approx(2 / 3)
    assert stats.average_steps == pytest.approx(3.0)


def test_task_statistics_empty():
    stats = compute_task_statistics([])

    assert stats.total == 0
    assert stats.completion_rate == 0.0
    assert stats.average_steps == 0.0


def test_system_overview():
    agents = [
        Agent("a1", "a1", "o", frozenset({"analyze", "execute"}), frozenset(), AgentStatus.ACTIVE),
        Agent("a2", "a2", "o", frozenset({"analyze"}), frozenset()),
    ]
    tasks = [_task("t1", TaskStatus.RUNNING), _task("t2", TaskStatus.COMPLETED)]

    overview = compute_system_overview(agents, tasks)

    assert overview.agent_count == 2
    assert overview.task_count == 2
    assert overview.active_task_count == 1
    assert overview.completed_task_count == 1
    assert overview.capabilities == {"analyze": 2, "execute": 1}
