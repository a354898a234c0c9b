"""Convergence detection: poll sessions, the poller and bounded waits."""

from .deadline import resolve_timeout, run_bounded
from .poller import ApplicationCatalog, ConvergencePoller, ConvergenceStrategy
from .session import PollSession, SessionState

__all__ = [
    "ApplicationCatalog",
    "ConvergencePoller",
    "ConvergenceStrategy",
    "PollSession",
    "SessionState",
    "resolve_timeout",
    "run_bounded",
]
