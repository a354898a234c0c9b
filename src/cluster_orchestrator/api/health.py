"""Health check endpoint for the status API itself."""

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter

from cluster_orchestrator import __version__

router = APIRouter()


@router.get("/health", response_model=Dict[str, str])
async def health_check() -> Dict[str, str]:
    """Simple health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
