"""Per-wait poll session: cancellation flag and deadline."""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Optional


class SessionState(str, Enum):
    RUNNING = "running"
    CANCEL_REQUESTED = "cancel_requested"
    STOPPED = "stopped"


_ORDER = {
    SessionState.RUNNING: 0,
    SessionState.CANCEL_REQUESTED: 1,
    SessionState.STOPPED: 2,
}


class PollSession:
    """Owns the stop flag and deadline for a single wait call.

    The state only moves forward (running -> cancel_requested -> stopped),
    so readers never need a lock. Deadlines use the event loop's monotonic
    clock.
    """

    def __init__(self, timeout: float, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()
        self.deadline = self._loop.time() + timeout
        self._state = SessionState.RUNNING
        self._wakeup = asyncio.Event()
        self.cancelled = False

    @property
    def state(self) -> SessionState:
        return self._state

    def _advance(self, state: SessionState) -> None:
        if _ORDER[state] > _ORDER[self._state]:
            self._state = state
            self._wakeup.set()

    def request_cancel(self) -> None:
        """Ask the poll loop to stop; it is observed on the next iteration."""
        self.cancelled = True
        self._advance(SessionState.CANCEL_REQUESTED)

    def stop(self) -> None:
        self._advance(SessionState.STOPPED)

    @property
    def is_stopped(self) -> bool:
        """True once a stop or cancel has been requested. Idempotent to read."""
        return self._state is not SessionState.RUNNING

    def remaining(self) -> float:
        return max(0.0, self.deadline - self._loop.time())

    @property
    def expired(self) -> bool:
        return self._loop.time() >= self.deadline

    @property
    def active(self) -> bool:
        return not self.is_stopped and not self.expired

    async def sleep(self, interval: float) -> None:
        """Sleep for the poll interval, waking early if the session stops."""
        delay = min(interval, self.remaining())
        if delay <= 0 or self.is_stopped:
            return
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass
