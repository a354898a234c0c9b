"""Status API entry point."""

import signal
import sys
from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from cluster_orchestrator import __version__
from cluster_orchestrator.api.apps import router as apps_router
from cluster_orchestrator.api.health import router as health_router
from cluster_orchestrator.api.middleware import setup_error_handling, setup_logging_middleware
from cluster_orchestrator.core.config import Settings
from cluster_orchestrator.deploy.client import SchedulerClient
from cluster_orchestrator.deploy.orchestrator import DeploymentOrchestrator
from cluster_orchestrator.utils.logging import setup_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting status API", version=__version__, scheduler=app.state.settings.scheduler_url)
    yield
    logger.info("Shutting down status API")
    await app.state.orchestrator.client.close()


def create_app(
    settings: Optional[Settings] = None,
    orchestrator: Optional[DeploymentOrchestrator] = None,
) -> FastAPI:
    """Create FastAPI application."""
    if settings is None:
        settings = Settings()

    setup_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Cluster Orchestrator",
        version=__version__,
        description="Readiness and convergence queries against the cluster scheduler",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.orchestrator = orchestrator or DeploymentOrchestrator(
        SchedulerClient.from_settings(settings), settings
    )

    setup_error_handling(app)
    setup_logging_middleware(app)

    app.include_router(health_router)
    app.include_router(apps_router, prefix="/v1", tags=["apps"])
    app.mount("/metrics", make_asgi_app())

    return app


def run():
    """Run the status API."""
    settings = Settings()

    def handle_sigterm(signum, frame):
        logger.info("Received SIGTERM, initiating graceful shutdown")
        sys.exit(0)

    signal.signal(signal.SIGTERM, handle_sigterm)

    config = uvicorn.Config(
        "cluster_orchestrator.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,  # We handle logging ourselves
        access_log=False,  # Handled by middleware
    )

    server = uvicorn.Server(config)
    server.run()


if __name__ == "__main__":
    run()
