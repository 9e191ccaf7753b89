"""Decision engine - ranks eligible agents and keeps their outcome history."""

from collections import deque
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from core.domain.value_objects import Budget
from core.infrastructure.logging import get_logger
from core.utils.datetime import utc_now

DEFAULT_HISTORY_WINDOW = 100
NEUTRAL_SUCCESS_RATE = 0.5


@dataclass(frozen=True)
class SelectionContext:
    """What the caller knows about the step being placed."""

    required_capabilities: frozenset[str] = frozenset()
    required_networks: frozenset[str] = frozenset()
    task_id: str | None = None
    step_id: str | None = None
    deadline: datetime | None = None
    budget: Budget | None = None


@dataclass(frozen=True)
class AgentCandidate:
    """Eligible agent projected for ranking."""

    agent_id: str
    score: float
    matched_capabilities: frozenset[str] = frozenset()
    matched_networks: frozenset[str] = frozenset()
    estimated_cost: Budget | None = None
    estimated_time_ms: int | None = None


@dataclass(frozen=True)
class ScoredCandidate:
    """Candidate with its adjusted score."""

    candidate: AgentCandidate
    adjusted_score: float

    @property
    def agent_id(self) -> str:
        return self.candidate.agent_id


@dataclass(frozen=True)
class ExecutionRecord:
    """One recorded step outcome for an agent."""

    task_id: str
    step_id: str
    success: bool
    execution_time_ms: int
    timestamp: datetime


@dataclass(frozen=True)
class PerformanceStats:
    """Aggregates derived from an agent's bounded history."""

    agent_id: str
    total_tasks: int = 0
    successful_tasks: int = 0
    failed_tasks: int = 0
    average_execution_time_ms: float = 0.0
    success_rate: float = 0.0


class DecisionEngine:
    """Multiplicative scoring over base score, history, deadline and budget.

    - history factor: ``0.5 + success_rate`` (neutral 1.0 with no history)
    - deadline factor: ``deadline_penalty`` when the estimate overruns
    - budget factor: ``budget_penalty`` when the estimate exceeds the budget
    """

    def __init__(
        self,
        history_window: int = DEFAULT_HISTORY_WINDOW,
        deadline_penalty: float = 0.5,
        budget_penalty: float = 0.5,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if history_window <= 0:
            raise ValueError("history_window must be positive")
        self._history_window = history_window
        self._deadline_penalty = deadline_penalty
        self._budget_penalty = budget_penalty
        self._clock = clock
        self._history: dict[str, deque[ExecutionRecord]] = {}
        self._logger = get_logger("orchestration.decision")

    def score(
        self, context: SelectionContext, candidates: Sequence[AgentCandidate]
    ) -> list[ScoredCandidate]:
        """Score candidates and sort them best first.

        Ties keep their input order.
        """
        now = self._clock()
        scored = [
            ScoredCandidate(candidate=c, adjusted_score=self._adjust(context, c, now))
            for c in candidates
        ]
        scored.sort(key=lambda s: s.adjusted_score, reverse=True)
        return scored

    def rank(
        self, context: SelectionContext, candidates: Sequence[AgentCandidate]
    ) -> str | None:
        """Return the id of the best candidate, or None if there are none."""
        if not candidates:
            return None
        best = self.score(context, candidates)[0]
        self._logger.debug(
            f"Ranked {len(candidates)} candidate(s) for step {context.step_id}: "
            f"picked {best.agent_id} (score {best.adjusted_score:.3f})"
        )
        return best.agent_id

    def record_outcome(
        self,
        agent_id: str,
        task_id: str,
        step_id: str,
        success: bool,
        execution_time_ms: int,
    ) -> None:
        """Append an outcome, dropping the oldest once the window is full."""
        history = self._history.get(agent_id)
        if history is None:
            history = deque(maxlen=self._history_window)
            self._history[agent_id] = history
        history.append(
            ExecutionRecord(
                task_id=task_id,
                step_id=step_id,
                success=success,
                execution_time_ms=execution_time_ms,
                timestamp=self._clock(),
            )
        )

    def stats(self, agent_id: str) -> PerformanceStats:
        """Derive performance aggregates from the agent's history."""
        history = self._history.get(agent_id)
        if not history:
            return PerformanceStats(agent_id=agent_id)

        total = len(history)
        successful = sum(1 for r in history if r.success)
        return PerformanceStats(
            agent_id=agent_id,
            total_tasks=total,
            successful_tasks=successful,
            failed_tasks=total - successful,
            average_execution_time_ms=sum(r.execution_time_ms for r in history) / total,
            success_rate=successful / total,
        )

    def history(self, agent_id: str) -> list[ExecutionRecord]:
        return list(self._history.get(agent_id, ()))

    def _success_rate(self, agent_id: str) -> float:
        history = self._history.get(agent_id)
        if not history:
            return NEUTRAL_SUCCESS_RATE
        return sum(1 for r in history if r.success) / len(history)

    def _adjust(self, context: SelectionContext, candidate: AgentCandidate, now: datetime) -> float:
        score = candidate.score * (0.5 + self._success_rate(candidate.agent_id))

        if context.deadline is not None and candidate.estimated_time_ms is not None:
            remaining_ms = (context.deadline - now).total_seconds() * 1000
            if candidate.estimated_time_ms > remaining_ms:
                score *= self._deadline_penalty

        if context.budget is not None and candidate.estimated_cost is not None:
            if candidate.estimated_cost.exceeds(context.budget):
                score *= self._budget_penalty

        return score
