"""Client-side convergence detection by polling the scheduler."""

from __future__ import annotations

from typing import Callable, List, Optional, Protocol

import httpx
import structlog

from cluster_orchestrator.convergence.session import PollSession
from cluster_orchestrator.core.exceptions import OrchestratorError
from cluster_orchestrator.core.models import ApplicationState
from cluster_orchestrator.health.aggregator import HealthAggregator
from cluster_orchestrator.utils.app_ids import normalize_app_id
from cluster_orchestrator.utils.metrics import POLL_ATTEMPTS

logger = structlog.get_logger()

DEFAULT_POLL_INTERVAL_SECONDS = 0.5

ReadinessCondition = Callable[[ApplicationState], bool]


class ApplicationCatalog(Protocol):
    """Read side of the scheduler consumed by the poller."""

    async def list_application_ids(self) -> List[str]:
        ...

    async def fetch_application(self, app_id: str) -> ApplicationState:
        ...


class ConvergenceStrategy(Protocol):
    """Anything that can block until an application converges."""

    async def poll_until_ready(
        self,
        app_id: str,
        session: PollSession,
        condition: Optional[ReadinessCondition] = None,
    ) -> bool:
        """Return True once converged, False if the session stopped first."""
        ...


class ConvergencePoller:
    """Polls the catalog at a fixed interval until a readiness condition holds.

    The scheduler offers no way to ask whether a deployment finished, so
    convergence is inferred from repeated snapshots. Listing and fetch
    failures are treated as transient and retried on the next tick.
    """

    def __init__(
        self,
        catalog: ApplicationCatalog,
        aggregator: Optional[HealthAggregator] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ):
        self.catalog = catalog
        self.aggregator = aggregator or HealthAggregator()
        self.poll_interval = poll_interval

    async def has_application(self, app_id: str) -> bool:
        target = normalize_app_id(app_id)
        ids = await self.catalog.list_application_ids()
        return any(normalize_app_id(i) == target for i in ids)

    async def poll_until_ready(
        self,
        app_id: str,
        session: PollSession,
        condition: Optional[ReadinessCondition] = None,
    ) -> bool:
        app_id = normalize_app_id(app_id)
        condition = condition or self.aggregator.is_ready
        attempt = 0

        while session.active:
            attempt += 1
            try:
                if await self.has_application(app_id):
                    app = await self.catalog.fetch_application(app_id)
                    if condition(app):
                        POLL_ATTEMPTS.labels(result="ready").inc()
                        logger.info("Application converged", appId=app_id, attempts=attempt)
                        return True
                    POLL_ATTEMPTS.labels(result="pending").inc()
                    logger.debug(
                        "Application not converged yet",
                        appId=app_id,
                        instances=app.instances,
                        tasksRunning=app.tasksRunning,
                    )
                else:
                    POLL_ATTEMPTS.labels(result="absent").inc()
                    logger.debug("Application not listed yet", appId=app_id, attempt=attempt)
            except (OrchestratorError, httpx.HTTPError) as exc:
                POLL_ATTEMPTS.labels(result="error").inc()
                logger.debug("Poll attempt failed, retrying", appId=app_id, attempt=attempt, error=str(exc))

            await session.sleep(self.poll_interval)

        if session.is_stopped:
            session.stop()
            logger.info("Poll session stopped", appId=app_id, attempts=attempt)
        return False
