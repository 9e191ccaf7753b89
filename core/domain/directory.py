"""
Agent Directory Interface (Domain Layer).

The only collaborator the scheduler consumes. Pure interface definition.
"""
from typing import Iterable, List, Optional, Protocol

from .entities import Agent
from .enums import AgentStatus


class AgentDirectory(Protocol):
    """Lookup of registered agents by requirements."""

    async def find_agents(
        self,
        capabilities: Optional[Iterable[str]] = None,
        networks: Optional[Iterable[str]] = None,
        status: Optional[AgentStatus] = None,
    ) -> List[Agent]:
        """
        Find agents matching the given criteria.

        Args:
            capabilities: Every one of these must be offered by the agent
            networks: At least one of these must be supported (any if empty)
            status: Restrict to agents in this status

        Returns:
            Matching agents in directory order
        """
        ...
