"""
Test settings loading from the environment.

This test verifies that every settings section loads with its defaults,
honours its env prefix, and rejects invalid values.
"""
from __future__ import annotations

import pytest
from pydantic import ValidationError

# Import api.dependencies so dotenv loads exactly once (canonical location).
import api.dependencies  # noqa: F401

from core.settings import AppSettings, SchedulerSettings, ServerSettings, get_app_settings


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_app_settings.cache_clear()
    yield
    get_app_settings.cache_clear()


def test_scheduler_defaults(monkeypatch):
    for name in (
        "HISTORY_WINDOW",
        "DEADLINE_PENALTY",
        "BUDGET_PENALTY",
        "DEFAULT_BASE_SCORE",
        "MAX_STEPS_PER_TASK",
    ):
        monkeypatch.delenv(f"AGENTMESH_SCHEDULER_{name}", raising=False)

    settings = SchedulerSettings(_env_file=None)

    assert settings.history_window == 100
    assert settings.deadline_penalty == 0.5
    assert settings.budget_penalty == 0.5
    assert settings.default_base_score == 1.0
    assert settings.max_steps_per_task == 50


def test_scheduler_reads_prefixed_env(monkeypatch):
    monkeypatch.setenv("AGENTMESH_SCHEDULER_HISTORY_WINDOW", "25")
    monkeypatch.setenv("AGENTMESH_SCHEDULER_BUDGET_PENALTY", "0.25")

    settings = SchedulerSettings(_env_file=None)

    assert settings.history_window == 25
    assert settings.budget_penalty == 0.25


@pytest.mark.parametrize(
    "name,value",
    [
        ("AGENTMESH_SCHEDULER_HISTORY_WINDOW", "0"),
        ("AGENTMESH_SCHEDULER_DEADLINE_PENALTY", "1.5"),
        ("AGENTMESH_SCHEDULER_BUDGET_PENALTY", "0"),
        ("AGENTMESH_SCHEDULER_MAX_STEPS_PER_TASK", "-1"),
    ],
)
def test_scheduler_rejects_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        SchedulerSettings(_env_file=None)


def test_server_reads_prefixed_env(monkeypatch):
    monkeypatch.setenv("AGENTMESH_SERVER_PORT", "8080")
    monkeypatch.setenv("AGENTMESH_SERVER_LOG_LEVEL", "DEBUG")

    settings = ServerSettings(_env_file=None)

    assert settings.port == 8080
    assert settings.log_level == "DEBUG"


def test_app_settings_is_cached():
    first = get_app_settings()

    assert isinstance(first, AppSettings)
    assert get_app_settings() is first
    assert isinstance(first.scheduler, SchedulerSettings)
    assert isinstance(first.server, ServerSettings)
