"""Orchestration layer - workflow scheduling over a pool of agents."""

from core.domain.directory import AgentDirectory
from core.settings import SchedulerSettings

from .bus import EventBusProtocol, InMemoryEventBus
from .decision import (
    AgentCandidate,
    DecisionEngine,
    PerformanceStats,
    ScoredCandidate,
    SelectionContext,
)
from .dispatch import ActivityStepDispatcher, InMemoryStepDispatcher, StepDispatcher
from .events import Event, EventMetadata
from .models import (
    CreateTaskRequest,
    StepAssignment,
    StepResult,
    TaskExecution,
    TaskExecutionResult,
)
from .orchestrator import NO_AGENT_AVAILABLE, Orchestrator
from .selector import AgentSelector, FirstMatchAgentSelector, RankedAgentSelector
from .store import InMemoryTaskStore
from .workflow import WorkflowEngine

__all__ = [
    "ActivityStepDispatcher",
    "AgentCandidate",
    "AgentSelector",
    "CreateTaskRequest",
    "DecisionEngine",
    "Event",
    "EventBusProtocol",
    "EventMetadata",
    "FirstMatchAgentSelector",
    "InMemoryEventBus",
    "InMemoryStepDispatcher",
    "InMemoryTaskStore",
    "NO_AGENT_AVAILABLE",
    "Orchestrator",
    "PerformanceStats",
    "RankedAgentSelector",
    "ScoredCandidate",
    "SelectionContext",
    "StepAssignment",
    "StepDispatcher",
    "StepResult",
    "TaskExecution",
    "TaskExecutionResult",
    "WorkflowEngine",
    "create_default_orchestrator",
]


def create_default_orchestrator(
    directory: AgentDirectory,
    settings: SchedulerSettings | None = None,
    dispatcher: StepDispatcher | None = None,
    event_bus: EventBusProtocol | None = None,
) -> Orchestrator:
    """Create an orchestrator with ranked selection and in-memory state.

    Args:
        directory: Agent directory to select workers from
        settings: Scheduler settings (loaded from the environment if omitted)
        dispatcher: Step dispatcher (in-memory queue if omitted)
        event_bus: Event bus (in-memory if omitted)

    Returns:
        Orchestrator instance
    """
    settings = settings or SchedulerSettings()
    decision_engine = DecisionEngine(
        history_window=settings.history_window,
        deadline_penalty=settings.deadline_penalty,
        budget_penalty=settings.budget_penalty,
    )
    return Orchestrator(
        directory=directory,
        selector=RankedAgentSelector(decision_engine, settings.default_base_score),
        decision_engine=decision_engine,
        dispatcher=dispatcher or InMemoryStepDispatcher(),
        event_bus=event_bus or InMemoryEventBus(),
        max_steps_per_task=settings.max_steps_per_task,
    )
