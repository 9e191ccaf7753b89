"""
Integration tests for agent and analytics endpoints.
"""


def _register(client, name: str, capabilities, networks=()):
    return client.post(
        "/api/v1/agents",
        json={
            "name": name,
            "owner": "owner-1",
            "capabilities": list(capabilities),
            "supportedNetworks": list(networks),
        },
    )


def test_register_agent(test_client):
    response = _register(test_client, "analyst", ["analyze"], ["ethereum"])

    assert response.status_code == 201
    agent = response.json()
    assert agent["status"] == "PENDING"
    assert agent["capabilities"] == ["analyze"]
    assert agent["supportedNetworks"] == ["ethereum"]


def test_register_agent_without_capabilities(test_client):
    assert _register(test_client, "idle", []).status_code == 422


def test_find_agents(test_client, active_agent):
    active = active_agent("multi", ["analyze", "execute"], ["ethereum"])
    _register(test_client, "solana-only", ["analyze"], ["solana"])

    all_agents = test_client.get("/api/v1/agents").json()
    assert len(all_agents) == 2

    both = test_client.get("/api/v1/agents", params={"capability": ["analyze", "execute"]}).json()
    assert [a["id"] for a in both] == [active["id"]]

    solana = test_client.get("/api/v1/agents", params={"network": "solana"}).json()
    assert [a["name"] for a in solana] == ["solana-only"]

    active_only = test_client.get("/api/v1/agents", params={"status": "ACTIVE"}).json()
    assert [a["id"] for a in active_only] == [active["id"]]


def test_get_update_and_delete_agent(test_client):
    agent = _register(test_client, "analyst", ["analyze"]).json()

    assert test_client.get(f"/api/v1/agents/{agent['id']}").json()["name"] == "analyst"

    response = test_client.put(f"/api/v1/agents/{agent['id']}/status", json={"status": "SUSPENDED"})
    assert response.json()["status"] == "SUSPENDED"

    assert test_client.delete(f"/api/v1/agents/{agent['id']}").status_code == 204
    assert test_client.get(f"/api/v1/agents/{agent['id']}").status_code == 404
    assert test_client.delete(f"/api/v1/agents/{agent['id']}").status_code == 404


def test_unknown_agent(test_client):
    assert test_client.put("/api/v1/agents/nope/status", json={"status": "ACTIVE"}).status_code == 404
    assert test_client.get("/api/v1/agents/nope/assignments").status_code == 404
    assert test_client.get("/api/v1/analytics/agents/nope/performance").status_code == 404


def test_invalid_status_value(test_client):
    agent = _register(test_client, "analyst", ["analyze"]).json()

    response = test_client.put(f"/api/v1/agents/{agent['id']}/status", json={"status": "RETIRED"})

    assert response.status_code == 422


def test_analytics(test_client, active_agent, wait_until):
    agent = active_agent("worker", ["analyze"])
    body = {
        "name": "single",
        "creator": "alice",
        "workflow": {"steps": [{"id": "a", "name": "a", "requirements": {"capabilities": ["analyze"]}}]},
    }
    task = test_client.post("/api/v1/tasks", json=body).json()
    test_client.post(f"/api/v1/tasks/{task['id']}/execute")
    wait_until(lambda: test_client.get(f"/api/v1/agents/{agent['id']}/assignments").json())
    test_client.post(f"/api/v1/tasks/{task['id']}/steps/a/result", json={"success": True, "output": {"v": 1}})
    wait_until(lambda: test_client.get(f"/api/v1/tasks/{task['id']}").json()["status"] == "COMPLETED")
    test_client.post("/api/v1/tasks", json=body)

    performance = test_client.get(f"/api/v1/analytics/agents/{agent['id']}/performance").json()
    assert performance["totalTasks"] == 1
    assert performance["successRate"] == 1.0

    statistics = test_client.get("/api/v1/analytics/tasks/statistics").json()
    assert statistics["total"] == 2
    assert statistics["byStatus"]["COMPLETED"] == 1
    assert statistics["byStatus"]["CREATED"] == 1
    assert statistics["completionRate"] == 1.0

    overview = test_client.get("/api/v1/analytics/system/overview").json()
    assert overview["agentCount"] == 1
    assert overview["taskCount"] == 2
    assert overview["completedTaskCount"] == 1
    assert overview["capabilities"] == {"analyze": 1}
