"""Agent registry adapters."""

from .in_memory_agent_registry import AgentRegistrationRequest, InMemoryAgentRegistry

__all__ = ["AgentRegistrationRequest", "InMemoryAgentRegistry"]
