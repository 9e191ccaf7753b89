"""
Analytics endpoints.

Read-only views over agent performance and task outcomes.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from api.dependencies import get_agent_registry, get_orchestrator
from api.serializers import (
    serialize_performance,
    serialize_system_overview,
    serialize_task_statistics,
)
from core.domain.errors import NotFoundError
from core.infrastructure.adapters.registry import InMemoryAgentRegistry
from orchestration import Orchestrator
from orchestration.analytics import compute_system_overview, compute_task_statistics


router = APIRouter()


@router.get("/agents/{agent_id}/performance", summary="Agent performance")
async def agent_performance(
    agent_id: str,
    registry: InMemoryAgentRegistry = Depends(get_agent_registry),
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """Aggregates over the agent's recent step outcomes."""
    if await registry.get_agent(agent_id) is None:
        raise NotFoundError("Agent", agent_id)
    return serialize_performance(orchestrator.decision_engine.stats(agent_id))


@router.get("/tasks/statistics", summary="Task statistics")
async def task_statistics(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    tasks = await orchestrator.list_tasks()
    return serialize_task_statistics(compute_task_statistics(tasks))


@router.get("/system/overview", summary="System overview")
async def system_overview(
    registry: InMemoryAgentRegistry = Depends(get_agent_registry),
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    tasks = await orchestrator.list_tasks()
    return serialize_system_overview(compute_system_overview(registry.get_all(), tasks))
