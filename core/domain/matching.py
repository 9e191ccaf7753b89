"""
Agent eligibility predicates.

Pure functions over immutable sets, shared by the registry and the
selectors.
"""
from typing import AbstractSet

from .entities import Agent
from .value_objects import AgentRequirements


def capabilities_satisfied(required: AbstractSet[str], offered: AbstractSet[str]) -> bool:
    """Offered capabilities must be a superset of the required ones."""
    return set(required) <= set(offered)


def network_compatible(required: AbstractSet[str], supported: AbstractSet[str]) -> bool:
    """At least one required network must be supported; no requirement matches anything."""
    if not required:
        return True
    return not set(required).isdisjoint(supported)


def is_eligible(agent: Agent, requirements: AgentRequirements) -> bool:
    """ACTIVE agent whose capabilities and networks satisfy the requirements."""
    return (
        agent.is_active
        and capabilities_satisfied(requirements.capabilities, agent.capabilities)
        and network_compatible(requirements.networks, agent.supported_networks)
    )
