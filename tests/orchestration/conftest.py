"""Shared fixtures for orchestration tests."""

import pytest

from core.domain.entities import Agent
from core.domain.enums import AgentStatus
from core.infrastructure.adapters.registry import AgentRegistrationRequest, InMemoryAgentRegistry
from orchestration.events import Event
from orchestration.models import StepAssignment
from orchestration.orchestrator import Orchestrator


class FakeEventBus:
    """Fake EventBus for testing."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    async def publish(self, event: Event) -> None:
        self.events.append(event)

    def subscribe(self, event_name: str, handler: object) -> None:
        pass

    @property
    def names(self) -> list[str]:
        return [event.name for event in self.events]


class ManualDispatcher:
    """Records assignments; the test reports results itself."""

    def __init__(self) -> None:
        self.assignments: list[StepAssignment] = []
        self.released: list[tuple[str, str]] = []

    async def dispatch(self, assignment: StepAssignment, report: object) -> None:
        self.assignments.append(assignment)

    def release(self, task_id: str, step_id: str) -> None:
        self.released.append((task_id, step_id))

    @property
    def step_ids(self) -> list[str]:
        return [a.step_id for a in self.assignments]


@pytest.fixture
def registry() -> InMemoryAgentRegistry:
    return InMemoryAgentRegistry()


@pytest.fixture
def event_bus() -> FakeEventBus:
    return FakeEventBus()


@pytest.fixture
def dispatcher() -> ManualDispatcher:
    return ManualDispatcher()


@pytest.fixture
def orchestrator(registry, dispatcher, event_bus) -> Orchestrator:
    return Orchestrator(directory=registry, dispatcher=dispatcher, event_bus=event_bus)


@pytest.fixture
def register_agent(registry):
    """Register an agent, ACTIVE unless told otherwise."""

    async def _register(
        name: str,
        capabilities,
        networks=(),
        metadata=None,
        status: AgentStatus = AgentStatus.ACTIVE,
    ) -> Agent:
        agent = await registry.register_agent(
            AgentRegistrationRequest(
                name=name,
                owner="owner-1",
                capabilities=list(capabilities),
                supported_networks=list(networks),
                metadata=metadata or {},
            )
        )
        if status != AgentStatus.PENDING:
            agent = await registry.update_agent_status(agent.id, status)
        return agent

    return _register
