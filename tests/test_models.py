"""Tests for scheduler wire models."""

import pytest
from pydantic import ValidationError

from cluster_orchestrator.core.models import (
    ApplicationState,
    DeploymentHandle,
    HealthCheckResult,
    TaskState,
)


def test_health_check_results_are_tri_state():
    task = TaskState.model_validate(
        {
            "id": "web-1.abc",
            "healthCheckResults": [{"alive": True}, {"alive": False}, None, {"taskId": "web-1.abc"}],
        }
    )
    assert task.healthCheckResults == [
        HealthCheckResult.ALIVE,
        HealthCheckResult.NOT_ALIVE,
        HealthCheckResult.UNKNOWN,
        HealthCheckResult.UNKNOWN,
    ]


def test_null_result_list_is_empty():
    task = TaskState.model_validate({"id": "web-1.abc", "healthCheckResults": None})
    assert task.healthCheckResults == []


def test_negative_instances_rejected():
    with pytest.raises(ValidationError):
        ApplicationState.model_validate({"id": "/web-1", "instances": -1})


def test_unknown_wire_fields_ignored():
    app = ApplicationState.model_validate(
        {"id": "/web-1", "instances": 1, "cpus": 0.5, "mem": 128, "healthChecks": None, "tasks": None}
    )
    assert app.tasks is None
    assert app.healthChecks == []
    assert app.has_health_checks is False


def test_snapshot_is_immutable():
    app = ApplicationState(id="/web-1", instances=1)
    with pytest.raises(ValidationError):
        app.instances = 2


def test_deployment_handles_skip_entries_without_id():
    app = ApplicationState.model_validate(
        {
            "id": "/web-1",
            "version": "2024-05-01T10:00:00.000Z",
            "deployments": [{"id": "d-1"}, {"other": "x"}, {"id": "d-2"}],
        }
    )
    assert app.deployment_handles() == [
        DeploymentHandle(deploymentId="d-1", version="2024-05-01T10:00:00.000Z"),
        DeploymentHandle(deploymentId="d-2", version="2024-05-01T10:00:00.000Z"),
    ]


def test_no_deployments_no_handles():
    assert ApplicationState(id="/web-1").deployment_handles() == []
