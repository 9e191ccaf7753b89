"""Analytics - read-only projections over tasks and agents."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from core.domain.entities import Agent, Task
from core.domain.enums import TaskStatus


@dataclass
class TaskStatistics:
    """Aggregate view of a set of tasks."""

    total: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    completion_rate: float = 0.0
    average_steps: float = 0.0


@dataclass
class SystemOverview:
    """Headline numbers for the whole system."""

    agent_count: int = 0
    task_count: int = 0
    active_task_count: int = 0
    completed_task_count: int = 0
    capabilities: dict[str, int] = field(default_factory=dict)


def compute_task_statistics(tasks: Iterable[Task]) -> TaskStatistics:
    """Count tasks per status, completion rate and average workflow length.

    Completion rate is COMPLETED / (COMPLETED + FAILED); canceled and
    unfinished tasks do not count.
    """
    tasks = list(tasks)
    by_status = {status.value: 0 for status in TaskStatus}
    for task in tasks:
        by_status[task.status.value] += 1

    finished = by_status[TaskStatus.COMPLETED.value] + by_status[TaskStatus.FAILED.value]
    completion_rate = by_status[TaskStatus.COMPLETED.value] / finished if finished else 0.0
    average_steps = (
        sum(len(task.workflow.steps) for task in tasks) / len(tasks) if tasks else 0.0
    )
    return TaskStatistics(
        total=len(tasks),
        by_status=by_status,
        completion_rate=completion_rate,
        average_steps=average_steps,
    )


def compute_system_overview(agents: Iterable[Agent], tasks: Iterable[Task]) -> SystemOverview:
    """Agent and task counts plus the number of agents offering each capability."""
    agents = list(agents)
    tasks = list(tasks)
    capabilities = Counter(cap for agent in agents for cap in agent.capabilities)
    return SystemOverview(
        agent_count=len(agents),
        task_count=len(tasks),
        active_task_count=sum(1 for t in tasks if t.status == TaskStatus.RUNNING),
        completed_task_count=sum(1 for t in tasks if t.status == TaskStatus.COMPLETED),
        capabilities=dict(sorted(capabilities.items())),
    )
