"""
Health check endpoints.

Used for monitoring and load balancer health checks.
"""
from fastapi import APIRouter, Depends
import platform

from api.dependencies import get_agent_registry, get_orchestrator
from core.infrastructure.adapters.registry import InMemoryAgentRegistry
from core.utils.datetime import utc_now
from orchestration import Orchestrator


router = APIRouter()


@router.get("/health")
async def health_check(
    registry: InMemoryAgentRegistry = Depends(get_agent_registry),
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """
    Health check endpoint.

    Returns system health status.
    """
    tasks = await orchestrator.list_tasks()
    return {
        "status": "healthy",
        "timestamp": utc_now().isoformat(),
        "service": "agentmesh",
        "version": "0.1.0",
        "python_version": platform.python_version(),
        "agents": len(registry.get_all()),
        "tasks": len(tasks),
    }
