"""Core data models for scheduler applications and deployments."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HealthCheckResult(str, Enum):
    """Outcome of one health check on one task."""

    ALIVE = "alive"
    NOT_ALIVE = "not_alive"
    UNKNOWN = "unknown"  # Reported as null while a task is flapping


class ReadinessVerdict(str, Enum):
    """Aggregated readiness of an application snapshot."""

    READY = "ready"
    NOT_READY = "not_ready"
    ERROR = "error"


class HealthCheckSpec(BaseModel):
    """Health check configured on an application."""

    model_config = ConfigDict(frozen=True, extra="allow")

    protocol: str = Field("HTTP", description="HTTP, HTTPS, TCP or COMMAND")
    path: Optional[str] = Field(None, description="Request path for HTTP checks")
    portIndex: Optional[int] = Field(None, description="Index into the application's ports")
    intervalSeconds: Optional[int] = None
    gracePeriodSeconds: Optional[int] = None
    timeoutSeconds: Optional[int] = None
    maxConsecutiveFailures: Optional[int] = None


def _to_health_check_result(value: Any) -> HealthCheckResult:
    if value is None:
        return HealthCheckResult.UNKNOWN
    if isinstance(value, HealthCheckResult):
        return value
    if isinstance(value, bool):
        return HealthCheckResult.ALIVE if value else HealthCheckResult.NOT_ALIVE
    if isinstance(value, str):
        return HealthCheckResult(value)
    if isinstance(value, dict):
        alive = value.get("alive")
        if alive is None:
            return HealthCheckResult.UNKNOWN
        return HealthCheckResult.ALIVE if alive else HealthCheckResult.NOT_ALIVE
    raise ValueError(f"unsupported health check result: {value!r}")


class TaskState(BaseModel):
    """A running task as reported in an application snapshot."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    appId: Optional[str] = None
    host: Optional[str] = None
    healthCheckResults: List[HealthCheckResult] = Field(default_factory=list)

    @field_validator("healthCheckResults", mode="before")
    @classmethod
    def parse_health_check_results(cls, v: Any) -> List[HealthCheckResult]:
        """Map wire results onto the tri-state enum; null entries become UNKNOWN."""
        if v is None:
            return []
        return [_to_health_check_result(item) for item in v]


class DeploymentHandle(BaseModel):
    """Identifier correlating a mutation with its server-side deployment.

    The scheduler keeps no history of finished deployments, so a handle
    cannot be used to learn whether a deployment succeeded.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    deploymentId: str
    version: Optional[str] = None


class ApplicationState(BaseModel):
    """Snapshot of an application as returned by the scheduler."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    instances: int = Field(0, ge=0, description="Desired instance count")
    tasksRunning: int = Field(0, ge=0, description="Running task count reported by the scheduler")
    tasksStaged: int = 0
    tasksHealthy: int = 0
    tasksUnhealthy: int = 0
    tasks: Optional[List[TaskState]] = None
    healthChecks: List[HealthCheckSpec] = Field(default_factory=list)
    version: Optional[str] = None
    deployments: List[Dict[str, str]] = Field(default_factory=list)

    @field_validator("healthChecks", "deployments", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def has_health_checks(self) -> bool:
        return len(self.healthChecks) > 0

    def deployment_handles(self) -> List[DeploymentHandle]:
        """Extract deployment handles, stamped with the application version."""
        handles: List[DeploymentHandle] = []
        for deployment in self.deployments:
            deployment_id = deployment.get("id")
            if deployment_id:
                handles.append(DeploymentHandle(deploymentId=deployment_id, version=self.version))
        return handles
