"""
FastAPI Dependencies.

Provides dependency injection for the registry, dispatcher and orchestrator.
"""
from __future__ import annotations

import logging
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from core.infrastructure.adapters.registry import InMemoryAgentRegistry
from core.settings import AppSettings, get_app_settings
from orchestration import InMemoryStepDispatcher, Orchestrator, create_default_orchestrator

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON INSTANCES
# =============================================================================

_agent_registry = None
_step_dispatcher = None
_orchestrator = None


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_settings() -> AppSettings:
    return get_app_settings()


def get_agent_registry() -> InMemoryAgentRegistry:
    global _agent_registry
    if _agent_registry is None:
        _agent_registry = InMemoryAgentRegistry()
        logger.info("Created InMemoryAgentRegistry instance")
    return _agent_registry


def get_step_dispatcher() -> InMemoryStepDispatcher:
    """Dispatcher queueing assignments for agents to pull."""
    global _step_dispatcher
    if _step_dispatcher is None:
        _step_dispatcher = InMemoryStepDispatcher()
        logger.info("Created InMemoryStepDispatcher instance")
    return _step_dispatcher


def get_orchestrator() -> Orchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = create_default_orchestrator(
            directory=get_agent_registry(),
            settings=get_settings().scheduler,
            dispatcher=get_step_dispatcher(),
        )
        logger.info("Created Orchestrator instance")
    return _orchestrator


# =============================================================================
# RESET (for testing)
# =============================================================================

def reset_dependencies():
    global _agent_registry, _step_dispatcher, _orchestrator

    _agent_registry = None
    _step_dispatcher = None
    _orchestrator = None
    get_app_settings.cache_clear()

    logger.info("Dependencies reset")
