"""Custom exceptions for the cluster orchestrator."""

from typing import Optional


class OrchestratorError(Exception):
    """Base exception for all orchestrator errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class InvalidArgumentError(OrchestratorError, ValueError):
    """Malformed input, rejected before any network call."""
    pass


class NotFoundError(OrchestratorError):
    """Application does not exist on the scheduler."""
    pass


class TransientError(OrchestratorError):
    """Listing or fetching failed; retrying later may succeed."""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, code)
        self.status_code = status_code


class SubmissionError(OrchestratorError):
    """The scheduler rejected a mutation."""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, code)
        self.status_code = status_code


class DeploymentTimeoutError(OrchestratorError, TimeoutError):
    """Deadline elapsed before the application converged."""
    pass


class WaitCancelledError(OrchestratorError):
    """Wait was cancelled before the application converged."""
    pass
