"""Agent selectors - narrow the directory to one agent for a step."""

import math
from decimal import Decimal, InvalidOperation
from typing import Protocol

from core.domain.directory import AgentDirectory
from core.domain.entities import Agent, WorkflowStep
from core.domain.enums import AgentStatus
from core.domain.matching import is_eligible
from core.domain.value_objects import Budget
from core.infrastructure.logging import get_logger

from .decision import AgentCandidate, DecisionEngine, SelectionContext

DEFAULT_BASE_SCORE = 1.0


class AgentSelector(Protocol):
    """Protocol for agent selection policies."""

    async def select_agent(
        self,
        step: WorkflowStep,
        directory: AgentDirectory,
        context: SelectionContext | None = None,
    ) -> str | None:
        """Pick an agent for a step.

        Args:
            step: Step to place
            directory: Directory to search
            context: Optional deadline/budget information

        Returns:
            Agent id, or None when no ACTIVE agent is eligible
        """
        ...


async def find_eligible_agents(step: WorkflowStep, directory: AgentDirectory) -> list[Agent]:
    """ACTIVE agents satisfying the step's requirements, in directory order."""
    requirements = step.requirements
    agents = await directory.find_agents(
        capabilities=requirements.capabilities,
        networks=requirements.networks,
        status=AgentStatus.ACTIVE,
    )
    return [agent for agent in agents if is_eligible(agent, requirements)]


class FirstMatchAgentSelector:
    """Baseline policy: the first eligible agent in directory order."""

    async def select_agent(
        self,
        step: WorkflowStep,
        directory: AgentDirectory,
        context: SelectionContext | None = None,
    ) -> str | None:
        agents = await find_eligible_agents(step, directory)
        return agents[0].id if agents else None


class RankedAgentSelector:
    """Ranks every eligible agent with the decision engine.

    Base score, cost and time estimates are read from agent metadata
    (``base_score``, ``estimated_cost`` as ``{"amount", "token"}``,
    ``estimated_time_ms``) when present.
    """

    def __init__(
        self, decision_engine: DecisionEngine, default_base_score: float = DEFAULT_BASE_SCORE
    ) -> None:
        self._decision_engine = decision_engine
        self._default_base_score = default_base_score
        self._logger = get_logger("orchestration.selector")

    async def select_agent(
        self,
        step: WorkflowStep,
        directory: AgentDirectory,
        context: SelectionContext | None = None,
    ) -> str | None:
        agents = await find_eligible_agents(step, directory)
        if not agents:
            return None

        if context is None:
            context = SelectionContext(
                required_capabilities=step.requirements.capabilities,
                required_networks=step.requirements.networks,
                step_id=step.id,
            )
        candidates = [self.to_candidate(agent, step) for agent in agents]
        return self._decision_engine.rank(context, candidates)

    def to_candidate(self, agent: Agent, step: WorkflowStep) -> AgentCandidate:
        """Project an eligible agent for ranking."""
        metadata = agent.metadata or {}
        return AgentCandidate(
            agent_id=agent.id,
            score=self._parse_base_score(agent, metadata.get("base_score")),
            matched_capabilities=step.requirements.capabilities & agent.capabilities,
            matched_networks=step.requirements.networks & agent.supported_networks,
            estimated_cost=self._parse_cost(agent, metadata.get("estimated_cost")),
            estimated_time_ms=self._parse_time(agent, metadata.get("estimated_time_ms")),
        )

    def _parse_base_score(self, agent: Agent, raw: object) -> float:
        if raw is None:
            return self._default_base_score
        try:
            score = float(raw)
        except (TypeError, ValueError):
            score = None
        if score is None or not math.isfinite(score) or score < 0 or isinstance(raw, bool):
            self._logger.warning(f"Ignoring malformed base_score on agent {agent.id}: {raw!r}")
            return self._default_base_score
        return score

    def _parse_time(self, agent: Agent, raw: object) -> int | None:
        if raw is None:
            return None
        if isinstance(raw, bool) or not isinstance(raw, (int, float)) or raw < 0 or not math.isfinite(raw):
            self._logger.warning(f"Ignoring malformed estimated_time_ms on agent {agent.id}: {raw!r}")
            return None
        return int(raw)

    def _parse_cost(self, agent: Agent, raw: object) -> Budget | None:
        if raw is None:
            return None
        if not isinstance(raw, dict):
            self._logger.warning(f"Ignoring malformed estimated_cost on agent {agent.id}: {raw!r}")
            return None
        try:
            return Budget(amount=Decimal(str(raw["amount"])), token=str(raw["token"]))
        except (KeyError, InvalidOperation, ValueError) as exc:
            self._logger.warning(f"Ignoring malformed estimated_cost on agent {agent.id}: {exc}")
            return None
