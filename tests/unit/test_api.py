"""Control channel endpoints."""

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from vml_designer.api import create_app

HEADERS = {"X-API-Key": "test-key"}


def _shell_runs() -> float:
    """Shell commands counted by the dispatcher."""
    return REGISTRY.get_sample_value("vml_commands_total", {"command": "Shell", "status": "ok"}) or 0.0


@pytest.fixture
def client(runtime):
    with TestClient(create_app(runtime)) as test_client:
        yield test_client


@pytest.mark.unit
def test_health_needs_no_key(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.unit
def test_api_key_required(client):
    assert client.get("/api/status").status_code == 401
    assert client.get("/api/status", headers={"X-API-Key": "wrong"}).status_code == 401


@pytest.mark.unit
def test_status(client):
    response = client.get("/api/status", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "running"
    assert "DesignCanvas" in data["roots"]
    assert "python" in data["interpreters"]
    assert "SetProperty" in data["commands"]


@pytest.mark.unit
def test_list_and_describe_controls(client, runtime):
    runtime.dispatch("CreateControl", ["Button", "Go"])

    listed = client.get("/api/controls", headers=HEADERS).json()
    names = [item["name"] for item in listed["controls"]]
    assert names == ["DesignCanvas", "Go"]
    assert listed["count"] == 2

    detail = client.get("/api/controls/Go", headers=HEADERS).json()
    assert detail["type"] == "Button"
    assert client.get("/api/controls/Missing", headers=HEADERS).status_code == 404


@pytest.mark.unit
def test_set_property(client, runtime):
    runtime.dispatch("CreateControl", ["Button", "Go"])

    response = client.post(
        "/api/controls/Go/set-property", json={"property": "Content", "value": "Run"}, headers=HEADERS
    )
    assert response.status_code == 200
    assert response.json()["value"] == "Run"
    assert runtime.store.get("Go", "Content") == "Run"

    rejected = client.post(
        "/api/controls/Go/set-property", json={"property": "Colour", "value": "red"}, headers=HEADERS
    )
    assert rejected.status_code == 400


@pytest.mark.unit
def test_invoke_method(client, runtime):
    runtime.dispatch("CreateControl", ["Slider", "Volume"])

    response = client.post("/api/controls/Volume/invoke-method", json={"method": "SetValue", "args": ["40"]}, headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["result"] == 40

    unknown = client.post("/api/controls/Volume/invoke-method", json={"method": "explode"}, headers=HEADERS)
    assert unknown.status_code == 400


@pytest.mark.unit
def test_fire_event_runs_bound_handlers(client, runtime, write_doc, save_form):
    write_doc("main.vml", save_form)
    runtime.open_form("main")

    response = client.post("/api/controls/Save/fire-event", json={"event": "Click"}, headers=HEADERS)
    assert response.json() == {"success": True, "event": "Click", "handlers": 1}


@pytest.mark.unit
def test_dispatch(client):
    response = client.post("/api/dispatch", json={"command": "GetSetting", "args": ["theme"]}, headers=HEADERS)
    assert response.json() == {"command": "GetSetting", "result": "light"}

    scheduled = client.post(
        "/api/dispatch", json={"command": "ExecuteScript", "args": ["python", "result = 1"]}, headers=HEADERS
    )
    assert scheduled.json()["result"] == {"scheduled": True}


@pytest.mark.unit
def test_shell(client):
    before = _shell_runs()
    response = client.post("/shell", content="echo channel", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["stdout"].strip() == "channel"
    assert data["exit_code"] == 0
    assert _shell_runs() == before + 1
    assert client.post("/shell", content="   ", headers=HEADERS).status_code == 400


@pytest.mark.unit
def test_metrics_exposed(client, runtime):
    runtime.dispatch("GetSetting", ["theme"])

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "vml_commands_total" in response.text
