"""Deployment façade and scheduler transport."""

from .client import APPS_PATH, SchedulerClient
from .orchestrator import DeploymentOrchestrator

__all__ = ["APPS_PATH", "DeploymentOrchestrator", "SchedulerClient"]
