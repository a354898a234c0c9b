"""Readiness aggregation over application snapshots."""

from __future__ import annotations

from typing import Optional

from cluster_orchestrator.core.models import (
    ApplicationState,
    HealthCheckResult,
    ReadinessVerdict,
)


class HealthAggregator:
    """Decides whether an application snapshot is up.

    Stateless; every verdict is a pure function of the snapshot passed in.
    """

    def instances_converged(self, app: Optional[ApplicationState]) -> bool:
        """Check instance-count parity only (health checks are not consulted).

        A scaled-to-zero application is trivially converged. Otherwise the
        snapshot must carry tasks and the reported running count must equal
        the desired instance count.
        """
        if app is None:
            return False
        if app.instances == 0:
            return True
        if not app.tasks:
            return False
        # Reported count, not len(tasks); the two can differ transiently
        return app.tasksRunning == app.instances

    def evaluate(self, app: Optional[ApplicationState]) -> ReadinessVerdict:
        """Full readiness verdict: instance parity and every health check alive."""
        if app is None:
            return ReadinessVerdict.ERROR
        if not self.instances_converged(app):
            return ReadinessVerdict.NOT_READY
        if app.instances == 0 or not app.has_health_checks:
            return ReadinessVerdict.READY

        for task in app.tasks or []:
            for result in task.healthCheckResults:
                if result is not HealthCheckResult.ALIVE:
                    return ReadinessVerdict.NOT_READY

        return ReadinessVerdict.READY

    def is_ready(self, app: Optional[ApplicationState]) -> bool:
        return self.evaluate(app) is ReadinessVerdict.READY
