"""Poll session: repeat a probe until a port reaches a desired state.

A session owns a deadline timer, at most one retry timer and at most one
in-flight probe task. It settles exactly once; the first of success, probe
error, deadline or cancellation wins and every later attempt to settle is
ignored. All of the session's timers and its probe task are released before
the caller sees the outcome.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from collections.abc import Awaitable, Callable

from portwait.config import ProbeTarget, WaitOptions
from portwait.errors import WaitTimeoutError

logger = logging.getLogger(__name__)

__all__ = ["PollSession", "SessionState", "Probe"]

Probe = Callable[[ProbeTarget], Awaitable[bool]]


class SessionState(str, enum.Enum):
    """Lifecycle of a poll session."""

    RUNNING = "running"
    SUCCEEDED = "succeeded"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    CANCELLED = "cancelled"


class PollSession:
    """Poll a probe until it reports the desired state or a deadline passes.

    Probes run strictly one after another: the next one is scheduled from
    the completion of the previous one, never concurrently.

    Usage:
        session = PollSession(target, in_use=True, options=USED_WAIT_DEFAULTS, probe=probe)
        await session.run()
    """

    def __init__(
        self,
        target: ProbeTarget,
        in_use: bool,
        options: WaitOptions,
        probe: Probe,
    ) -> None:
        """Initialize a session.

        Args:
            target: Validated host/port to probe
            in_use: Desired state; True waits until used, False until free
            options: Retry interval and deadline for this session
            probe: Coroutine function returning True when the port is in use
        """
        self._target = target
        self._in_use = in_use
        self._options = options
        self._probe = probe

        self._state = SessionState.RUNNING
        self._attempts = 0
        self._started_at: float | None = None
        self._future: asyncio.Future[None] | None = None
        self._deadline: asyncio.TimerHandle | None = None
        self._retry: asyncio.TimerHandle | None = None
        self._probe_task: asyncio.Task[bool] | None = None

    @property
    def target(self) -> ProbeTarget:
        return self._target

    @property
    def options(self) -> WaitOptions:
        return self._options

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def attempts(self) -> int:
        """Number of probes issued so far."""
        return self._attempts

    @property
    def settled(self) -> bool:
        return self._state is not SessionState.RUNNING

    @property
    def elapsed(self) -> float | None:
        """Seconds since run() started, or None if never started."""
        if self._started_at is None:
            return None
        return time.monotonic() - self._started_at

    @property
    def has_pending_resources(self) -> bool:
        """True while any timer or probe task is still held."""
        return (
            self._deadline is not None
            or self._retry is not None
            or self._probe_task is not None
        )

    async def run(self) -> None:
        """Poll until settled.

        Raises:
            WaitTimeoutError: If the deadline elapsed first
            ProbeError: If a probe failed unexpectedly
            asyncio.CancelledError: If the session or the awaiting task was cancelled
        """
        if self._future is not None:
            raise RuntimeError("PollSession.run() can only be called once")
        if self._state is SessionState.CANCELLED:
            raise asyncio.CancelledError()

        loop = asyncio.get_running_loop()
        self._future = loop.create_future()
        self._started_at = time.monotonic()
        want = "used" if self._in_use else "free"
        logger.debug(
            f"Waiting for {self._target} to be {want} "
            f"(retry: {self._options.retry_time_ms}ms, timeout: {self._options.timeout_ms}ms)"
        )

        self._deadline = loop.call_later(self._options.timeout_seconds, self._on_deadline)
        self._start_probe()

        try:
            await self._future
        except asyncio.CancelledError:
            # cancel() was called, or the awaiting task itself was cancelled
            self._settle(SessionState.CANCELLED)
            raise
        finally:
            await self._drain_probe()

    def cancel(self) -> bool:
        """Cancel the session.

        Returns:
            True if this call settled the session, False if it was already settled
        """
        return self._settle(SessionState.CANCELLED)

    def _start_probe(self) -> None:
        self._retry = None
        if self.settled:
            return
        self._attempts += 1
        self._probe_task = asyncio.ensure_future(self._probe(self._target))
        self._probe_task.add_done_callback(self._on_probe_done)

    def _on_probe_done(self, task: asyncio.Task[bool]) -> None:
        if task is self._probe_task:
            self._probe_task = None
        if task.cancelled():
            return

        error = task.exception()
        if self.settled:
            # Result arrived after the deadline or a cancel; discard it
            return
        if error is not None:
            logger.warning(f"Probe of {self._target} failed: {error}")
            self._settle(SessionState.FAILED, error)
            return

        if task.result() == self._in_use:
            self._settle(SessionState.SUCCEEDED)
            return

        loop = asyncio.get_running_loop()
        self._retry = loop.call_later(self._options.retry_seconds, self._start_probe)

    def _on_deadline(self) -> None:
        self._deadline = None
        self._settle(
            SessionState.TIMED_OUT,
            WaitTimeoutError(self._target.port, self._options.timeout_ms),
        )

    def _settle(self, state: SessionState, error: BaseException | None = None) -> bool:
        if self.settled:
            return False
        self._state = state
        self._release()

        logger.debug(
            f"Session for {self._target} {state.value} after {self._attempts} probe(s)"
        )

        future = self._future
        if future is not None and not future.done():
            if state is SessionState.CANCELLED:
                future.cancel()
            elif error is not None:
                future.set_exception(error)
            else:
                future.set_result(None)
        return True

    def _release(self) -> None:
        if self._deadline is not None:
            self._deadline.cancel()
            self._deadline = None
        if self._retry is not None:
            self._retry.cancel()
            self._retry = None
        if self._probe_task is not None:
            # Cancelling the task closes any half-open socket
            self._probe_task.cancel()

    async def _drain_probe(self) -> None:
        task = self._probe_task
        if task is None:
            return
        if not task.done():
            # asyncio.wait does not propagate the task's cancellation
            await asyncio.wait({task})
        self._probe_task = None
