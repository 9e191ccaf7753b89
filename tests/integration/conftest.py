"""Pytest configuration and fixtures for API integration tests."""

import time
from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from api.dependencies import reset_dependencies
from api.main import app


@pytest.fixture
def test_client() -> Generator[TestClient, None, None]:
    """Create FastAPI test client over fresh in-memory state.

    Used as a context manager so background dispatch keeps running on
    the client's event loop between requests.
    """
    reset_dependencies()
    with TestClient(app) as client:
        yield client
    reset_dependencies()


@pytest.fixture
def wait_until() -> Callable:
    """Poll a condition until it holds or the timeout expires."""

    def _wait(condition: Callable[[], object], timeout: float = 2.0, interval: float = 0.01):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            value = condition()
            if value:
                return value
            time.sleep(interval)
        raise AssertionError("Condition not met before timeout")

    return _wait


@pytest.fixture
def active_agent(test_client) -> Callable:
    """Register an agent and move it to ACTIVE."""

    def _create(name: str, capabilities, networks=(), metadata=None) -> dict:
        response = test_client.post(
            "/api/v1/agents",
            json={
                "name": name,
                "owner": "owner-1",
                "capabilities": list(capabilities),
                "supportedNetworks": list(networks),
                "metadata": metadata or {},
            },
        )
        assert response.status_code == 201
        agent = response.json()
        response = test_client.put(f"/api/v1/agents/{agent['id']}/status", json={"status": "ACTIVE"})
        assert response.status_code == 200
        return response.json()

    return _create
