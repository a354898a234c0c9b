"""Bounded waits with deadline and cooperative cancellation."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Any, Awaitable, Callable, Optional, Union

import structlog

from cluster_orchestrator.convergence.poller import DEFAULT_POLL_INTERVAL_SECONDS
from cluster_orchestrator.convergence.session import PollSession
from cluster_orchestrator.core.exceptions import DeploymentTimeoutError, WaitCancelledError
from cluster_orchestrator.utils.metrics import WAIT_DURATION, WAIT_OUTCOMES

logger = structlog.get_logger()

Timeout = Union[float, int, timedelta, None]
Work = Callable[[PollSession], Awaitable[Any]]


def resolve_timeout(timeout: Timeout, default_timeout: float) -> float:
    """Seconds to wait; None, zero and negative values mean the configured default."""
    if isinstance(timeout, timedelta):
        timeout = timeout.total_seconds()
    if timeout is None or timeout <= 0:
        return float(default_timeout)
    return float(timeout)


async def _watch_cancel(cancel_event: asyncio.Event, session: PollSession) -> None:
    await cancel_event.wait()
    session.request_cancel()


async def _drain(task: asyncio.Task, grace_seconds: float) -> None:
    """Give a signalled worker one poll interval to exit, then cancel it."""
    if not task.done():
        await asyncio.wait({task}, timeout=grace_seconds)
    if not task.done():
        task.cancel()
        await asyncio.wait({task})
    if not task.cancelled() and task.exception() is not None:
        logger.debug("Discarded worker error after wait ended", error=str(task.exception()))


def _record(outcome: str, started: float, loop: asyncio.AbstractEventLoop) -> None:
    WAIT_OUTCOMES.labels(outcome=outcome).inc()
    WAIT_DURATION.labels(outcome=outcome).observe(loop.time() - started)


async def run_bounded(
    timeout: Timeout,
    work: Work,
    *,
    default_timeout: float,
    cancel_event: Optional[asyncio.Event] = None,
    grace_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
) -> Any:
    """Run ``work`` under a deadline and an optional external cancel signal.

    ``work`` receives a fresh PollSession and must observe it cooperatively.
    It returns a truthy value on success; a falsy return means it stopped
    because the session was cancelled or expired.

    Exactly one outcome wins: the work finishing, the cancel signal, or the
    deadline. The others are signalled to stop and their results discarded.

    Args:
        timeout: Seconds or timedelta; None, zero or negative uses default_timeout.
        work: Coroutine function taking the session.
        default_timeout: Configured default deployment timeout in seconds.
        cancel_event: Event that, once set, cancels the wait.
        grace_seconds: How long a signalled worker may take to exit.

    Returns:
        The result of ``work`` when it succeeds.

    Raises:
        DeploymentTimeoutError: The deadline elapsed first.
        WaitCancelledError: The cancel signal arrived first.
    """
    seconds = resolve_timeout(timeout, default_timeout)
    loop = asyncio.get_running_loop()
    started = loop.time()
    session = PollSession(seconds, loop)

    worker = asyncio.create_task(work(session))
    watcher: Optional[asyncio.Task] = None
    waiters = {worker}
    if cancel_event is not None:
        watcher = asyncio.create_task(_watch_cancel(cancel_event, session))
        waiters.add(watcher)

    try:
        done, _ = await asyncio.wait(waiters, timeout=seconds, return_when=asyncio.FIRST_COMPLETED)

        if worker in done:
            result = worker.result()
            if result:
                _record("converged", started, loop)
                return result
            if session.cancelled:
                _record("cancelled", started, loop)
                raise WaitCancelledError("wait cancelled before convergence", code="cancelled")
            _record("timeout", started, loop)
            raise DeploymentTimeoutError(f"timed out after {seconds:g}s", code="timeout")

        if watcher is not None and watcher in done:
            await _drain(worker, grace_seconds)
            _record("cancelled", started, loop)
            logger.info("Wait cancelled", elapsed=round(loop.time() - started, 3))
            raise WaitCancelledError("wait cancelled before convergence", code="cancelled")

        session.stop()
        await _drain(worker, grace_seconds)
        _record("timeout", started, loop)
        logger.warning("Wait timed out", timeout=seconds)
        raise DeploymentTimeoutError(f"timed out after {seconds:g}s", code="timeout")
    finally:
        session.stop()
        for task in (watcher, worker):
            if task is not None and not task.done():
                task.cancel()
