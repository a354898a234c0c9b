"""Tests for the status API."""

import httpx
import pytest
from fastapi.testclient import TestClient

from cluster_orchestrator.deploy.client import SchedulerClient
from cluster_orchestrator.deploy.orchestrator import DeploymentOrchestrator
from cluster_orchestrator.main import create_app

from test_orchestrator import SchedulerStub, app_body


@pytest.fixture
def make_client(settings):
    def _make(stub) -> TestClient:
        scheduler = SchedulerClient.from_settings(settings, transport=httpx.MockTransport(stub))
        app = create_app(settings, DeploymentOrchestrator(scheduler, settings))
        return TestClient(app)

    return _make


def test_health(make_client):
    r = make_client(SchedulerStub()).get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"
    assert "X-Request-ID" in r.headers


def test_application_health_true(make_client):
    client = make_client(SchedulerStub([app_body(checks=1)]))
    r = client.get("/v1/apps/web-1/health")
    assert r.status_code == 200
    assert r.json() == {"appId": "/web-1", "healthy": True}


def test_nested_application_id(make_client):
    client = make_client(SchedulerStub([app_body("/prod/web", instances=1, running=1)]))
    r = client.get("/v1/apps/prod/web/health")
    assert r.status_code == 200
    assert r.json()["appId"] == "/prod/web"


def test_application_health_unknown_is_404(make_client):
    client = make_client(SchedulerStub([app_body()], listed=False))
    r = client.get("/v1/apps/web-1/health")
    assert r.status_code == 404
    assert r.json()["error"] == "NotFoundError"


def test_wait_converged(make_client):
    client = make_client(SchedulerStub([app_body(running=2), app_body()]))
    r = client.post("/v1/apps/web-1/wait", params={"timeout": 2})
    assert r.status_code == 200
    assert r.json() == {"appId": "/web-1", "converged": True}


def test_wait_timeout_is_504(make_client):
    client = make_client(SchedulerStub([app_body(running=1)]))
    r = client.post("/v1/apps/web-1/wait", params={"timeout": 0.2})
    assert r.status_code == 504
    assert r.json()["code"] == "timeout"


def test_metrics_exposed(make_client):
    r = make_client(SchedulerStub()).get("/metrics/")
    assert r.status_code == 200
    assert "orchestrator_wait_outcomes_total" in r.text
