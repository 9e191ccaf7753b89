"""
In-Memory Agent Registry Implementation.

Stores agents in a dictionary. Implements the AgentDirectory interface
consumed by the scheduler, plus the registration operations the API
exposes.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
import logging
import uuid

from core.domain.entities import Agent
from core.domain.enums import AgentStatus
from core.domain.errors import NotFoundError, ValidationError
from core.domain.matching import capabilities_satisfied, network_compatible
from core.utils.datetime import utc_now


logger = logging.getLogger(__name__)


@dataclass
class AgentRegistrationRequest:
    """Data needed to register a new agent."""
    name: str
    owner: str
    capabilities: List[str]
    supported_networks: List[str]
    description: str = ""
    endpoint: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)


class InMemoryAgentRegistry:
    """
    In-memory agent registry.

    Agents start PENDING and only receive work once moved to ACTIVE.
    Directory order is registration order.
    """

    def __init__(self):
        """Initialize empty storage."""
        self._agents: Dict[str, Agent] = {}
        logger.info("InMemoryAgentRegistry initialized (in-memory storage)")

    async def register_agent(self, request: AgentRegistrationRequest) -> Agent:
        """
        Register a new agent in PENDING status.

        Args:
            request: Registration data

        Returns:
            The registered agent

        Raises:
            ValidationError: If the agent declares no capabilities
        """
        if not request.capabilities:
            raise ValidationError("Agent must declare at least one capability")

        now = utc_now()
        agent = Agent(
            id=str(uuid.uuid4()),
            name=request.name,
            owner=request.owner,
            capabilities=frozenset(request.capabilities),
            supported_networks=frozenset(request.supported_networks),
            status=AgentStatus.PENDING,
            description=request.description,
            endpoint=request.endpoint,
            metadata=dict(request.metadata),
            created_at=now,
            updated_at=now,
        )
        self._agents[agent.id] = agent
        logger.info(f"Agent registered: {agent.id} ({agent.name}, owner: {agent.owner})")
        return agent

    async def get_agent(self, agent_id: str) -> Optional[Agent]:
        """
        Get agent by ID.

        Args:
            agent_id: Agent ID to lookup

        Returns:
            Agent if found, None otherwise
        """
        return self._agents.get(agent_id)

    async def find_agents(
        self,
        capabilities: Optional[Iterable[str]] = None,
        networks: Optional[Iterable[str]] = None,
        status: Optional[AgentStatus] = None,
        owner: Optional[str] = None,
    ) -> List[Agent]:
        """
        Find agents matching every given criterion.

        Args:
            capabilities: Agent must offer all of these
            networks: Agent must support at least one of these
            status: Agent must be in this status
            owner: Agent must belong to this owner

        Returns:
            Matching agents in registration order
        """
        required_capabilities = frozenset(capabilities or ())
        required_networks = frozenset(networks or ())

        matches = [
            agent
            for agent in self._agents.values()
            if capabilities_satisfied(required_capabilities, agent.capabilities)
            and network_compatible(required_networks, agent.supported_networks)
            and (status is None or agent.status == status)
            and (owner is None or agent.owner == owner)
        ]
        logger.debug(f"Found {len(matches)} agent(s) for capabilities={sorted(required_capabilities)}")
        return matches

    async def update_agent_status(self, agent_id: str, status: AgentStatus) -> Agent:
        """
        Move an agent to a new status.

        Args:
            agent_id: Agent to update
            status: New status

        Returns:
            The updated agent

        Raises:
            NotFoundError: If the agent does not exist
        """
        agent = self._agents.get(agent_id)
        if agent is None:
            raise NotFoundError("Agent", agent_id)

        previous = agent.status
        agent.status = status
        agent.updated_at = utc_now()
        logger.info(f"Agent {agent_id} status: {previous.value} -> {status.value}")
        return agent

    async def deregister_agent(self, agent_id: str) -> bool:
        """
        Remove an agent from the registry.

        Args:
            agent_id: Agent to remove

        Returns:
            True if removed, False if it was not registered
        """
        if agent_id not in self._agents:
            logger.warning(f"Agent not found for deregistration: {agent_id}")
            return False

        del self._agents[agent_id]
        logger.info(f"Agent deregistered: {agent_id}")
        return True

    def get_all(self) -> List[Agent]:
        """
        Get all agents (for analytics/testing).

        Returns:
            List of all agents
        """
        return list(self._agents.values())

    def clear(self) -> None:
        """Clear all agents (for testing)."""
        self._agents.clear()
        logger.info("Agent registry cleared")
