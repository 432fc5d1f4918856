"""Cancellable repeating tasks for the playback clock.

Playback never spawns threads. A tick is a callback run by a cooperative
scheduler, so it always runs to completion before any other timeline
mutation. Cancelling a handle guarantees the callback will not run again.

Two schedulers are provided:

- :class:`AsyncioScheduler` drives ticks from an asyncio event loop
  (the API server's loop or ``asyncio.run`` in the CLI).
- :class:`ManualScheduler` keeps a simulated clock that only moves when
  :meth:`ManualScheduler.advance` is called. Used for headless stepping and
  in tests.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, Protocol

TickCallback = Callable[[], None]


class RepeatingHandle(Protocol):
    """Handle to a scheduled repeating task."""

    @property
    def cancelled(self) -> bool: ...

    def cancel(self) -> None:
        """Stop the task. Idempotent."""
        ...


class Scheduler(Protocol):
    def schedule_repeating(
        self, interval_ms: float, callback: TickCallback
    ) -> RepeatingHandle:
        """Run ``callback`` every ``interval_ms`` until the handle is cancelled."""
        ...


class _AsyncioRepeatingHandle:
    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval_ms: float,
        callback: TickCallback,
    ):
        self._loop = loop
        self._interval_s = interval_ms / 1000.0
        self._callback = callback
        self._cancelled = False
        self._timer: asyncio.TimerHandle | None = None
        self._next_at = loop.time() + self._interval_s
        self._arm()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def _arm(self) -> None:
        self._timer = self._loop.call_at(self._next_at, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        # Fixed-rate: schedule from the ideal time so ticks don't drift
        self._next_at += self._interval_s
        try:
            self._callback()
        finally:
            if not self._cancelled:
                self._arm()

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    The loop is resolved when a task is scheduled, so the scheduler can be
    built outside of a running loop. ``schedule_repeating`` and ``cancel``
    must be called from the loop's thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def schedule_repeating(
        self, interval_ms: float, callback: TickCallback
    ) -> _AsyncioRepeatingHandle:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        return _AsyncioRepeatingHandle(self._get_loop(), interval_ms, callback)


class _ManualRepeatingHandle:
    def __init__(self, interval_ms: float, callback: TickCallback):
        self.interval_ms = interval_ms
        self.callback = callback
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class ManualScheduler:
    """Deterministic scheduler driven by a simulated millisecond clock."""

    def __init__(self):
        self.now_ms: float = 0.0
        self._queue: list[tuple[float, int, _ManualRepeatingHandle]] = []
        self._seq = itertools.count()

    def schedule_repeating(
        self, interval_ms: float, callback: TickCallback
    ) -> _ManualRepeatingHandle:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        handle = _ManualRepeatingHandle(interval_ms, callback)
        heapq.heappush(
            self._queue, (self.now_ms + interval_ms, next(self._seq), handle)
        )
        return handle

    @property
    def active_count(self) -> int:
        """Number of scheduled tasks that have not been cancelled."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def advance(self, ms: float) -> int:
        """Move the clock forward, firing every tick that falls due.

        Returns:
            Number of callbacks invoked
        """
        target = self.now_ms + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now_ms = due
            handle.callback()
            fired += 1
            if not handle.cancelled:
                heapq.heappush(
                    self._queue, (due + handle.interval_ms, next(self._seq), handle)
                )
        self.now_ms = target
        return fired
