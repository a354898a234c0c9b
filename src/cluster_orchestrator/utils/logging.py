"""Logging configuration utilities."""

import logging
import sys
from typing import ContextManager, Dict, Optional

import structlog
from structlog.contextvars import bound_contextvars

# Only the scheduler credentials can end up in log events
SENSITIVE_KEYS = frozenset({"password", "authorization", "http_basic_auth_password"})


def _redact_credentials(_, __, event_dict: dict) -> dict:
    """Mask scheduler credentials before rendering."""
    for key in event_dict:
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = "[REDACTED]"
    return event_dict


def _renderer(log_format: str):
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """Configure structlog over stdout, filtered at ``log_level``."""
    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.set_exc_info,
            _redact_credentials,
            _renderer(log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def wait_context(app_id: Optional[str] = None, deployment_id: Optional[str] = None) -> ContextManager:
    """Correlation fields for the duration of a wait; restored on exit."""
    fields: Dict[str, str] = {}
    if app_id:
        fields["appId"] = app_id
    if deployment_id:
        fields["deploymentId"] = deployment_id
    return bound_contextvars(**fields)
