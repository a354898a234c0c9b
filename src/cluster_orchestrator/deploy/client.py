"""HTTP transport for the scheduler's application API."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx
import structlog
from pydantic import ValidationError

from cluster_orchestrator.core.config import Settings
from cluster_orchestrator.core.exceptions import NotFoundError, SubmissionError, TransientError
from cluster_orchestrator.core.models import ApplicationState
from cluster_orchestrator.utils.app_ids import app_path

logger = structlog.get_logger()

APPS_PATH = "/v2/apps"


class SchedulerClient:
    """Async client for listing, fetching and mutating scheduler applications."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        auth: Optional[Tuple[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            auth=auth,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "SchedulerClient":
        return cls(
            settings.scheduler_url,
            timeout=settings.request_timeout_seconds,
            auth=settings.basic_auth,
            transport=transport,
        )

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "SchedulerClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
        mutating: bool = False,
    ) -> Any:
        try:
            response = await self.client.request(method, path, json=payload, params=params)
        except httpx.TimeoutException as exc:
            raise TransientError(f"{method} {path} timed out", code="timeout") from exc
        except httpx.HTTPError as exc:
            raise TransientError(f"{method} {path} failed: {exc}", code="transport") from exc

        if response.status_code == 404:
            raise NotFoundError(f"{path} not found", code="not_found")
        if response.status_code >= 400:
            message = _error_message(response)
            if mutating and response.status_code < 500:
                raise SubmissionError(message, code="rejected", status_code=response.status_code)
            raise TransientError(message, code="http_error", status_code=response.status_code)

        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as exc:
            raise TransientError(f"{method} {path} returned invalid JSON", code="decode") from exc
        if not isinstance(body, dict):
            raise TransientError(f"{method} {path} returned a non-object body", code="decode")
        return body

    async def list_application_ids(self) -> List[str]:
        """Ids of every application the scheduler currently knows about."""
        body = await self._request("GET", APPS_PATH)
        apps = body.get("apps") or []
        if not isinstance(apps, list):
            raise TransientError(f"{APPS_PATH} returned a malformed application list", code="decode")
        return [app["id"] for app in apps if isinstance(app, dict) and app.get("id")]

    async def fetch_application(self, app_id: str) -> Optional[ApplicationState]:
        """Fetch the application snapshot including its tasks.

        Returns None when the scheduler answers without an application body.
        """
        body = await self._request(
            "GET",
            f"{APPS_PATH}/{app_path(app_id)}",
            params={"embed": "apps.tasks"},
        )
        app = body.get("app")
        if app is None:
            return None
        try:
            return ApplicationState.model_validate(app)
        except ValidationError as exc:
            raise TransientError(f"malformed snapshot for {app_id}: {exc.error_count()} errors", code="decode") from exc

    async def application_versions(self, app_id: str) -> List[str]:
        body = await self._request("GET", f"{APPS_PATH}/{app_path(app_id)}/versions")
        return list(body.get("versions", []))

    async def submit(
        self,
        method: str,
        path: str,
        payload: Optional[Any] = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send a mutation and return the decoded response body."""
        logger.debug("Submitting mutation", method=method, path=path)
        return await self._request(method, path, payload=payload, params=params, mutating=True)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return f"scheduler returned {response.status_code}: {body['message']}"
    return f"scheduler returned {response.status_code}"
