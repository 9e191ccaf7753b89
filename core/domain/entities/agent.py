"""
Agent entity.

An agent is an external worker registered with declared capabilities
and supported networks. The scheduler only reads agents; the registry
owns them.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, Optional

from ..enums import AgentStatus


@dataclass
class Agent:
    """Registered worker that can execute workflow steps."""
    id: str
    name: str
    owner: str
    capabilities: FrozenSet[str]
    supported_networks: FrozenSet[str]
    status: AgentStatus = AgentStatus.PENDING
    description: str = ""
    endpoint: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.capabilities = frozenset(self.capabilities)
        self.supported_networks = frozenset(self.supported_networks)

    @property
    def is_active(self) -> bool:
        """Only ACTIVE agents receive work."""
        return self.status == AgentStatus.ACTIVE
