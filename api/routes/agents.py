"""
Agent endpoints.

Registration and lifecycle of the worker pool, plus the queue of steps
assigned to each agent.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from api.dependencies import get_agent_registry, get_step_dispatcher
from api.schemas import AgentStatusBody, RegisterAgentBody
from api.serializers import serialize_agent, serialize_assignment
from core.domain.enums import AgentStatus
from core.domain.errors import NotFoundError
from core.infrastructure.adapters.registry import InMemoryAgentRegistry
from orchestration import InMemoryStepDispatcher


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, summary="Register agent")
async def register_agent(
    body: RegisterAgentBody,
    registry: InMemoryAgentRegistry = Depends(get_agent_registry),
) -> Dict[str, Any]:
    """
    Register an agent.

    New agents are PENDING and receive no work until activated.
    """
    agent = await registry.register_agent(body.to_request())
    return serialize_agent(agent)


@router.get("", summary="Find agents")
async def find_agents(
    capability: Optional[List[str]] = Query(default=None),
    network: Optional[List[str]] = Query(default=None),
    status: Optional[AgentStatus] = None,
    owner: Optional[str] = None,
    registry: InMemoryAgentRegistry = Depends(get_agent_registry),
) -> List[Dict[str, Any]]:
    agents = await registry.find_agents(
        capabilities=capability, networks=network, status=status, owner=owner
    )
    return [serialize_agent(agent) for agent in agents]


@router.get("/{agent_id}", summary="Get agent")
async def get_agent(
    agent_id: str,
    registry: InMemoryAgentRegistry = Depends(get_agent_registry),
) -> Dict[str, Any]:
    agent = await registry.get_agent(agent_id)
    if agent is None:
        raise NotFoundError("Agent", agent_id)
    return serialize_agent(agent)


@router.put("/{agent_id}/status", summary="Update agent status")
async def update_agent_status(
    agent_id: str,
    body: AgentStatusBody,
    registry: InMemoryAgentRegistry = Depends(get_agent_registry),
) -> Dict[str, Any]:
    agent = await registry.update_agent_status(agent_id, body.status)
    return serialize_agent(agent)


@router.delete("/{agent_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Deregister agent")
async def deregister_agent(
    agent_id: str,
    registry: InMemoryAgentRegistry = Depends(get_agent_registry),
) -> None:
    if not await registry.deregister_agent(agent_id):
        raise NotFoundError("Agent", agent_id)


@router.get("/{agent_id}/assignments", summary="List assigned steps")
async def list_assignments(
    agent_id: str,
    registry: InMemoryAgentRegistry = Depends(get_agent_registry),
    dispatcher: InMemoryStepDispatcher = Depends(get_step_dispatcher),
) -> List[Dict[str, Any]]:
    """Steps dispatched to this agent, oldest first."""
    if await registry.get_agent(agent_id) is None:
        raise NotFoundError("Agent", agent_id)
    return [serialize_assignment(a) for a in dispatcher.assignments_for(agent_id)]
