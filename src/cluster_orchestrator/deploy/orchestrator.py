"""Deployment orchestration: submit mutations, optionally wait for steady state."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping, Optional

import structlog

from cluster_orchestrator.convergence.deadline import Timeout, run_bounded
from cluster_orchestrator.convergence.poller import ConvergencePoller, ConvergenceStrategy
from cluster_orchestrator.convergence.session import PollSession
from cluster_orchestrator.core.config import Settings
from cluster_orchestrator.core.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    OrchestratorError,
)
from cluster_orchestrator.core.models import ApplicationState, DeploymentHandle, ReadinessVerdict
from cluster_orchestrator.deploy.client import APPS_PATH, SchedulerClient
from cluster_orchestrator.health.aggregator import HealthAggregator
from cluster_orchestrator.utils.app_ids import app_path, normalize_app_id
from cluster_orchestrator.utils.logging import wait_context

logger = structlog.get_logger()


class DeploymentOrchestrator:
    """Façade over application mutations and convergence waits.

    Waiting (``wait_for_steady_state`` and the ``wait_for_steady_state=True``
    flag on create/update) only checks instance-count parity. Health checks
    are consulted solely by ``is_application_healthy``; a converged
    application is not necessarily a healthy one.
    """

    def __init__(
        self,
        client: SchedulerClient,
        settings: Optional[Settings] = None,
        poller: Optional[ConvergenceStrategy] = None,
        aggregator: Optional[HealthAggregator] = None,
    ):
        self.client = client
        self.settings = settings or Settings()
        self.aggregator = aggregator or HealthAggregator()
        self.poller = poller or ConvergencePoller(
            client,
            aggregator=self.aggregator,
            poll_interval=self.settings.poll_interval_seconds,
        )

    # Mutations

    async def create_application(
        self,
        definition: Mapping[str, Any],
        wait_for_steady_state: bool = False,
        timeout: Timeout = None,
    ) -> ApplicationState:
        """Create an application; the server echo is returned.

        Args:
            definition: Application definition as sent to the scheduler.
            wait_for_steady_state: Block until all instances are running.
            timeout: Wait timeout; None/0 uses the configured default.
        """
        payload = _with_normalized_id(definition)
        app_id = payload["id"]
        logger.info("Creating application", appId=app_id, wait=wait_for_steady_state)
        body = await self.client.submit("POST", APPS_PATH, payload)
        result = ApplicationState.model_validate(body or payload)

        if wait_for_steady_state:
            await self.wait_for_steady_state(app_id, timeout)
        return result

    async def update_application(
        self,
        definition: Mapping[str, Any],
        wait_for_steady_state: bool = False,
        timeout: Timeout = None,
        force: bool = False,
    ) -> DeploymentHandle:
        """Replace an application's definition, starting a deployment."""
        payload = _with_normalized_id(definition)
        app_id = payload["id"]
        logger.info("Updating application", appId=app_id, wait=wait_for_steady_state, force=force)
        body = await self.client.submit(
            "PUT",
            f"{APPS_PATH}/{app_path(app_id)}",
            payload,
            params={"force": _flag(force)},
        )
        handle = _handle(body)
        if wait_for_steady_state:
            with wait_context(deployment_id=handle.deploymentId):
                await self.wait_for_steady_state(app_id, timeout)
        return handle

    async def scale_application(self, app_id: str, instances: int, force: bool = False) -> DeploymentHandle:
        """Change the number of instances; force overrides a locked deployment."""
        app_id = normalize_app_id(app_id)
        if instances < 0:
            raise InvalidArgumentError("instances cannot be negative", code="invalid_instances")
        logger.info("Scaling application", appId=app_id, instances=instances, force=force)
        body = await self.client.submit(
            "PUT",
            f"{APPS_PATH}/{app_path(app_id)}",
            {"id": app_id, "instances": instances},
            params={"force": _flag(force)},
        )
        return _handle(body)

    async def restart_application(self, app_id: str, force: bool = False) -> DeploymentHandle:
        """Rolling restart of every task of the application."""
        app_id = normalize_app_id(app_id)
        logger.info("Restarting application", appId=app_id, force=force)
        body = await self.client.submit("POST", f"{APPS_PATH}/{app_path(app_id)}/restart", {"force": force})
        return _handle(body)

    async def delete_application(self, app_id: str) -> DeploymentHandle:
        app_id = normalize_app_id(app_id)
        logger.info("Deleting application", appId=app_id)
        body = await self.client.submit("DELETE", f"{APPS_PATH}/{app_path(app_id)}")
        return _handle(body)

    async def set_application_version(self, app_id: str, version: str) -> DeploymentHandle:
        """Roll the application back (or forward) to a recorded version."""
        app_id = normalize_app_id(app_id)
        if not version:
            raise InvalidArgumentError("version cannot be empty", code="invalid_version")
        body = await self.client.submit("PUT", f"{APPS_PATH}/{app_path(app_id)}", {"version": version})
        return _handle(body)

    # Queries

    async def has_application(self, app_id: str) -> bool:
        target = normalize_app_id(app_id)
        ids = await self.client.list_application_ids()
        return any(normalize_app_id(i) == target for i in ids)

    async def application_versions(self, app_id: str) -> List[str]:
        return await self.client.application_versions(normalize_app_id(app_id))

    async def has_application_version(self, app_id: str, version: str) -> bool:
        return version in await self.application_versions(app_id)

    async def application_deployments(self, app_id: str) -> List[DeploymentHandle]:
        """Deployments currently in flight for the application."""
        app = await self.client.fetch_application(normalize_app_id(app_id))
        if app is None:
            return []
        return app.deployment_handles()

    async def is_application_healthy(self, app_id: str) -> bool:
        """Instance parity plus every task's health checks alive.

        Raises:
            InvalidArgumentError: Empty id.
            NotFoundError: The application does not exist.
            OrchestratorError: The scheduler returned no application body.
        """
        app_id = normalize_app_id(app_id)
        if not await self.has_application(app_id):
            raise NotFoundError(f"application {app_id} does not exist", code="not_found")

        app = await self.client.fetch_application(app_id)
        verdict = self.aggregator.evaluate(app)
        if verdict is ReadinessVerdict.ERROR:
            raise OrchestratorError(f"no snapshot returned for {app_id}", code="empty_snapshot")
        return verdict is ReadinessVerdict.READY

    # Waiting

    async def wait_for_steady_state(
        self,
        app_id: str,
        timeout: Timeout = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> None:
        """Block until the running task count matches the desired instance count.

        Raises:
            InvalidArgumentError: Empty id.
            DeploymentTimeoutError: Not converged before the deadline.
            WaitCancelledError: ``cancel_event`` was set first.
        """
        app_id = normalize_app_id(app_id)

        async def _work(session: PollSession) -> bool:
            return await self.poller.poll_until_ready(app_id, session, self.aggregator.instances_converged)

        with wait_context(app_id=app_id):
            await run_bounded(
                timeout,
                _work,
                default_timeout=self.settings.default_deployment_timeout_seconds,
                cancel_event=cancel_event,
                grace_seconds=self.settings.poll_interval_seconds,
            )


def _with_normalized_id(definition: Mapping[str, Any]) -> Dict[str, Any]:
    payload = dict(definition)
    payload["id"] = normalize_app_id(payload.get("id", ""))
    return payload


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _handle(body: Mapping[str, Any]) -> DeploymentHandle:
    deployment_id = body.get("deploymentId") if body else None
    if not deployment_id:
        raise OrchestratorError("scheduler response carried no deployment id", code="missing_deployment_id")
    return DeploymentHandle.model_validate(body)
