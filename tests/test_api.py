import pytest
from fastapi.testclient import TestClient

from leadflow.config import settings
from leadflow.main import create_app
from leadflow.persistence.memory import InMemoryStore


@pytest.fixture
def store(monkeypatch):
    shared = InMemoryStore()
    for module in (
        "leadflow.services.distribution.pipeline",
        "leadflow.services.reports.history",
        "leadflow.services.roster.service",
    ):
        monkeypatch.setattr(f"{module}.get_store", lambda: shared)
    return shared


@pytest.fixture
def client(store):
    return TestClient(create_app())


def _csv(count: int) -> bytes:
    rows = ["FirstName,Phone,Notes"] + [f"C{i},555-{i:04d}," for i in range(count)]
    return ("\n".join(rows) + "\n").encode("utf-8")


def _create_agent(client: TestClient, name: str) -> dict:
    response = client.post(
        "/api/agents",
        json={"name": name, "email": f"{name.lower()}@example.com", "mobile": "+100", "password": "pw"},
    )
    assert response.status_code == 201
    return response.json()["agent"]


def _upload(client: TestClient, payload: bytes, filename: str = "leads.csv", **kwargs):
    return client.post("/api/upload/customers", files={"file": (filename, payload, "text/csv")}, **kwargs)


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_upload_distributes_and_records(client):
    alice, bob = _create_agent(client, "Alice"), _create_agent(client, "Bob")

    response = _upload(client, _csv(5), headers={"X-Uploader-Id": "admin-1"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["totalCustomers"] == 5
    assert body["totalAgents"] == 2
    assert [(d["agentId"], d["customersAssigned"]) for d in body["distribution"]] == [(alice["id"], 3), (bob["id"], 2)]
    assert [d["totalCustomers"] for d in body["distribution"]] == [3, 2]
    assert body["failedAgents"] == []
    assert body["distributionId"]

    detail = client.get(f"/api/distributions/{body['distributionId']}")
    assert detail.status_code == 200
    distribution = detail.json()["distribution"]
    assert distribution["filename"] == "leads.csv"
    assert distribution["totalCustomers"] == 5
    assert distribution["uploadedBy"] == {"id": "admin-1", "name": None, "email": None}
    assert distribution["assignments"][0]["agent"]["name"] == "Alice"
    assert distribution["assignments"][0]["customers"][0]["FirstName"] == "C0"


def test_upload_without_file_is_rejected(client):
    response = client.post("/api/upload/customers", data={"note": "no file"})

    assert response.status_code == 400


def test_upload_with_unsupported_extension_is_rejected(client):
    _create_agent(client, "Alice")

    response = _upload(client, b"FirstName,Phone\nA,1\n", filename="leads.txt")

    assert response.status_code == 415


def test_upload_without_active_agents_is_rejected(client, store):
    response = _upload(client, _csv(3))

    assert response.status_code == 400
    assert "agents" in response.json()["detail"]


def test_upload_without_valid_rows_is_rejected(client):
    _create_agent(client, "Alice")

    response = _upload(client, b"FirstName,Phone,Notes\n,,note\n")

    assert response.status_code == 400


def test_oversized_upload_is_rejected(client, monkeypatch):
    _create_agent(client, "Alice")
    monkeypatch.setattr(settings, "max_upload_bytes", 8)

    response = _upload(client, _csv(3))

    assert response.status_code == 413


def test_current_workloads(client):
    alice = _create_agent(client, "Alice")
    _upload(client, _csv(2))

    response = client.get("/api/upload/distribution")

    assert response.status_code == 200
    workloads = response.json()["distribution"]
    assert workloads[0]["agentId"] == alice["id"]
    assert workloads[0]["totalCustomers"] == 2
    assert workloads[0]["customers"][0]["assignedAt"]


def test_distribution_history_filters_and_pages(client):
    alice = _create_agent(client, "Alice")
    _upload(client, _csv(1), filename="march.csv")
    _upload(client, _csv(1), filename="april.csv")

    listed = client.get("/api/distributions", params={"limit": 1})
    filtered = client.get("/api/distributions", params={"filename": "MARCH", "agentId": alice["id"]})

    assert listed.status_code == 200
    assert listed.json()["limit"] == 1
    assert [r["filename"] for r in listed.json()["results"]] == ["april.csv"]
    assert [r["filename"] for r in filtered.json()["results"]] == ["march.csv"]


def test_distribution_history_rejects_bad_parameters(client):
    assert client.get("/api/distributions", params={"startDate": "yesterday"}).status_code == 400
    assert client.get("/api/distributions", params={"page": 0}).status_code == 422


def test_unknown_distribution_is_not_found(client):
    assert client.get("/api/distributions/missing").status_code == 404


def test_agent_lifecycle(client):
    agent = _create_agent(client, "Alice")
    assert agent["isActive"] is True
    assert "password" not in agent and "password_hash" not in agent

    duplicate = client.post(
        "/api/agents",
        json={"name": "Other", "email": "ALICE@example.com", "mobile": "+1", "password": "pw"},
    )
    assert duplicate.status_code == 409

    incomplete = client.post("/api/agents", json={"name": "Nobody"})
    assert incomplete.status_code == 400

    updated = client.put(f"/api/agents/{agent['id']}", json={"isActive": False})
    assert updated.status_code == 200
    assert updated.json()["agent"]["isActive"] is False

    listed = client.get("/api/agents").json()
    assert listed["count"] == 1

    assert client.delete(f"/api/agents/{agent['id']}").status_code == 200
    assert client.get(f"/api/agents/{agent['id']}").status_code == 404


def test_unexpected_errors_are_opaque(store, monkeypatch):
    from leadflow.services import roster

    def boom():
        raise RuntimeError("secret connection string")

    monkeypatch.setattr(roster, "list_agents", boom)
    client = TestClient(create_app(), raise_server_exceptions=False)

    response = client.get("/api/agents")

    assert response.status_code == 500
    assert response.json() == {"success": False, "detail": "Internal server error."}
