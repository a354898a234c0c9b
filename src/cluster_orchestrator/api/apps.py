"""Application readiness and wait endpoints."""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel

from cluster_orchestrator.deploy.orchestrator import DeploymentOrchestrator
from cluster_orchestrator.utils.app_ids import normalize_app_id

router = APIRouter()
logger = structlog.get_logger()


class HealthResponse(BaseModel):
    appId: str
    healthy: bool


class WaitResponse(BaseModel):
    appId: str
    converged: bool


def get_orchestrator(request: Request) -> DeploymentOrchestrator:
    return request.app.state.orchestrator


@router.get("/apps/{app_id:path}/health", response_model=HealthResponse)
async def application_health(
    app_id: str,
    orchestrator: DeploymentOrchestrator = Depends(get_orchestrator),
) -> HealthResponse:
    """All instances running and every health check passing."""
    app_id = normalize_app_id(app_id)
    healthy = await orchestrator.is_application_healthy(app_id)
    return HealthResponse(appId=app_id, healthy=healthy)


@router.post("/apps/{app_id:path}/wait", response_model=WaitResponse)
async def wait_for_application(
    app_id: str,
    timeout: Optional[float] = Query(None, description="Seconds; omitted or <= 0 uses the default"),
    orchestrator: DeploymentOrchestrator = Depends(get_orchestrator),
) -> WaitResponse:
    """Block until the running task count matches the desired instances."""
    app_id = normalize_app_id(app_id)
    await orchestrator.wait_for_steady_state(app_id, timeout)
    return WaitResponse(appId=app_id, converged=True)
