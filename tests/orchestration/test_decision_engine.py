"""Tests for DecisionEngine."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.domain.value_objects import Budget
from orchestration.decision import AgentCandidate, DecisionEngine, SelectionContext

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine() -> DecisionEngine:
    return DecisionEngine(clock=lambda: NOW)


def _record(engine: DecisionEngine, agent_id: str, successes: int, failures: int) -> None:
    for i in range(successes):
        engine.record_outcome(agent_id, "task-1", f"ok-{i}", True, 100)
    for i in range(failures):
        engine.record_outcome(agent_id, "task-1", f"ko-{i}", False, 300)


def test_rank_empty_returns_none(engine):
    assert engine.rank(SelectionContext(), []) is None


def test_rank_prefers_higher_base_score(engine):
    candidates = [AgentCandidate("a", 1.0), AgentCandidate("b", 2.0)]

    assert engine.rank(SelectionContext(), candidates) == "b"


def test_ties_keep_input_order(engine):
    candidates = [AgentCandidate("a", 1.0), AgentCandidate("b", 1.0)]

    assert engine.rank(SelectionContext(), candidates) == "a"
    assert [s.agent_id for s in engine.score(SelectionContext(), candidates)] == ["a", "b"]


def test_no_history_is_neutral(engine):
    scored = engine.score(SelectionContext(), [AgentCandidate("a", 2.0)])

    assert scored[0].adjusted_score == pytest.approx(2.0)


def test_history_is_monotonic_in_success_rate(engine):
    _record(engine, "good", successes=9, failures=1)
    _record(engine, "bad", successes=1, failures=9)

    scored = {
        s.agent_id: s.adjusted_score
        for s in engine.score(
            SelectionContext(), [AgentCandidate("bad", 1.0), AgentCandidate("good", 1.0)]
        )
    }

    assert scored["good"] > scored["bad"]
    assert scored["good"] == pytest.approx(1.4)
    assert scored["bad"] == pytest.approx(0.6)


def test_deadline_penalty_applies_when_estimate_overruns(engine):
    context = SelectionContext(deadline=NOW + timedelta(seconds=1))
    slow = AgentCandidate("slow", 1.0, estimated_time_ms=5_000)
    fast = AgentCandidate("fast", 1.0, estimated_time_ms=500)

    scored = {s.agent_id: s.adjusted_score for s in engine.score(context, [slow, fast])}

    assert scored["slow"] == pytest.approx(0.5)
    assert scored["fast"] == pytest.approx(1.0)
    assert engine.rank(context, [slow, fast]) == "fast"


def test_budget_penalty_only_for_same_token(engine):
    context = SelectionContext(budget=Budget(Decimal("10"), "USDC"))
    pricey = AgentCandidate("pricey", 1.0, estimated_cost=Budget(Decimal("20"), "USDC"))
    other_token = AgentCandidate("other", 1.0, estimated_cost=Budget(Decimal("20"), "ETH"))
    cheap = AgentCandidate("cheap", 1.0, estimated_cost=Budget(Decimal("5"), "USDC"))

    scored = {s.agent_id: s.adjusted_score for s in engine.score(context, [pricey, other_token, cheap])}

    assert scored["pricey"] == pytest.approx(0.5)
    assert scored["other"] == pytest.approx(1.0)
    assert scored["cheap"] == pytest.approx(1.0)


def test_history_is_bounded_ring_buffer():
    engine = DecisionEngine(history_window=100)
    for i in range(150):
        engine.record_outcome("a", "task-1", f"s{i}", i >= 50, 10)

    history = engine.history("a")

    assert len(history) == 100
    assert history[0].step_id == "s50"
    assert history[-1].step_id == "s149"
    assert engine.stats("a").success_rate == pytest.approx(1.0)


def test_stats(engine):
    _record(engine, "a", successes=3, failures=1)

    stats = engine.stats("a")

    assert stats.total_tasks == 4
    assert stats.successful_tasks == 3
    assert stats.failed_tasks == 1
    assert stats.success_rate == pytest.approx(0.75)
    assert stats.average_execution_time_ms == pytest.approx(150.0)


def test_stats_for_unknown_agent_are_zero(engine):
    stats = engine.stats("nobody")

    assert stats.total_tasks == 0
    assert stats.success_rate == 0.0


def test_invalid_window():
    with pytest.raises(ValueError):
        DecisionEngine(history_window=0)
