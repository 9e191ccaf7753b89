"""Domain value objects."""

from .value_objects import AgentRequirements, Budget

__all__ = [
    "AgentRequirements",
    "Budget",
]
