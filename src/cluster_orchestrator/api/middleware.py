"""API middleware for logging and error handling."""

import time
import uuid
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cluster_orchestrator.core.exceptions import (
    DeploymentTimeoutError,
    InvalidArgumentError,
    NotFoundError,
    OrchestratorError,
    SubmissionError,
    TransientError,
    WaitCancelledError,
)

logger = structlog.get_logger()

_STATUS_CODES = (
    (InvalidArgumentError, 400),
    (NotFoundError, 404),
    (SubmissionError, 409),
    (WaitCancelledError, 409),
    (TransientError, 502),
    (DeploymentTimeoutError, 504),
)


def _status_for(exc: OrchestratorError) -> int:
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


def setup_error_handling(app: FastAPI) -> None:
    """Setup error handling middleware."""

    @app.exception_handler(OrchestratorError)
    async def orchestrator_error_handler(request: Request, exc: OrchestratorError) -> JSONResponse:
        """Map orchestrator errors onto HTTP status codes."""
        return JSONResponse(
            status_code=_status_for(exc),
            content={
                "error": exc.__class__.__name__,
                "message": str(exc),
                "code": exc.code,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle validation errors."""
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Invalid request data",
                "details": exc.errors(),
            },
        )


def setup_logging_middleware(app: FastAPI) -> None:
    """Setup request logging middleware."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        start_time = time.time()

        response = await call_next(request)

        logger.info(
            "Request completed",
            status_code=response.status_code,
            duration_seconds=time.time() - start_time,
        )
        response.headers["X-Request-ID"] = request_id
        return response
