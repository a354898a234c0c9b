"""Cluster Orchestrator - convergence-aware client for a cluster scheduler."""

__version__ = "0.1.0"

from cluster_orchestrator.core.config import Settings
from cluster_orchestrator.core.models import (
    ApplicationState,
    DeploymentHandle,
    HealthCheckResult,
    ReadinessVerdict,
    TaskState,
)

__all__ = [
    "ApplicationState",
    "DeploymentHandle",
    "HealthCheckResult",
    "ReadinessVerdict",
    "Settings",
    "TaskState",
    "__version__",
]
