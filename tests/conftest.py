"""
Pytest configuration and fixtures for orchestrator tests.
"""

from typing import List, Optional, Sequence

import pytest

from cluster_orchestrator.core.config import Settings
from cluster_orchestrator.core.exceptions import TransientError
from cluster_orchestrator.core.models import ApplicationState

SETTINGS_ENV = (
    "SCHEDULER_URL",
    "HTTP_BASIC_AUTH_USER",
    "HTTP_BASIC_AUTH_PASSWORD",
    "REQUEST_TIMEOUT_SECONDS",
    "DEFAULT_DEPLOYMENT_TIMEOUT_SECONDS",
    "POLL_INTERVAL_SECONDS",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def clean_settings_env(monkeypatch, tmp_path):
    """
    Keep every test independent of the developer's environment and .env file.
    """
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def make_app(
    app_id: str = "/web-1",
    instances: int = 3,
    running: Optional[int] = None,
    checks: int = 0,
    results: Optional[Sequence[Sequence[object]]] = None,
    tasks: Optional[int] = None,
) -> ApplicationState:
    """Build a snapshot the way the scheduler would serialise it.

    ``results`` holds per-task wire health check results (dicts or None).
    """
    running = instances if running is None else running
    task_count = running if tasks is None else tasks
    task_list = []
    for index in range(task_count):
        if results is not None:
            task_results = list(results[index])
        else:
            task_results = [{"alive": True} for _ in range(checks)]
        task_list.append({"id": f"{app_id.strip('/')}.{index}", "appId": app_id, "healthCheckResults": task_results})
    return ApplicationState.model_validate(
        {
            "id": app_id,
            "instances": instances,
            "tasksRunning": running,
            "tasks": task_list or None,
            "healthChecks": [{"protocol": "HTTP", "path": "/health"} for _ in range(checks)],
        }
    )


class FakeCatalog:
    """Scripted scheduler read side.

    Snapshots are served in order; the last one repeats. The application is
    unlisted for the first ``unlisted_polls`` listings and listing raises for
    the first ``list_failures`` calls.
    """

    def __init__(
        self,
        snapshots: Sequence[ApplicationState],
        list_failures: int = 0,
        unlisted_polls: int = 0,
    ):
        self.snapshots: List[ApplicationState] = list(snapshots)
        self.list_failures = list_failures
        self.unlisted_polls = unlisted_polls
        self.list_calls = 0
        self.fetch_calls = 0

    async def list_application_ids(self) -> List[str]:
        self.list_calls += 1
        if self.list_calls <= self.list_failures:
            raise TransientError("listing failed")
        if self.list_calls <= self.list_failures + self.unlisted_polls:
            return ["/other"]
        return ["/other", self.snapshots[0].id]

    async def fetch_application(self, app_id: str) -> Optional[ApplicationState]:
        index = min(self.fetch_calls, len(self.snapshots) - 1)
        self.fetch_calls += 1
        return self.snapshots[index]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        scheduler_url="http://scheduler.test",
        default_deployment_timeout_seconds=2.0,
        poll_interval_seconds=0.05,
        log_format="console",
    )
