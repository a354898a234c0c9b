"""Prometheus metrics for convergence waits."""

from prometheus_client import Counter, Histogram

POLL_ATTEMPTS = Counter(
    "orchestrator_poll_attempts_total",
    "Convergence poll attempts",
    ["result"],
)

WAIT_OUTCOMES = Counter(
    "orchestrator_wait_outcomes_total",
    "Bounded wait outcomes",
    ["outcome"],
)

WAIT_DURATION = Histogram(
    "orchestrator_wait_duration_seconds",
    "Time spent in bounded waits",
    ["outcome"],
)
