"""Asyncio timers used by the refresh service.

Both timers run their callback as a separate task. Cancelling a timer only
stops the wait; a callback that has already started runs to completion.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

AsyncCallback = Callable[[], Awaitable[None]]


class TaskSet:
    """Strong references to fire-and-forget tasks until they finish."""

    def __init__(self):
        self._tasks: set[asyncio.Task] = set()

    def spawn(self, coro: Awaitable[None]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


class CancellableTimer:
    """Fire a callback once after a quiet period.

    Every :meth:`schedule` call cancels the pending wait and starts the
    countdown again, so a burst of calls fires the callback exactly once.
    """

    def __init__(self, delay: float, callback: AsyncCallback):
        self.delay = delay
        self._callback = callback
        self._pending: asyncio.Task | None = None
        self._fired = TaskSet()

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def schedule(self) -> None:
        """(Re)start the countdown. Must be called from a running loop."""
        self.cancel()
        self._pending = asyncio.get_running_loop().create_task(self._wait_then_fire())

    def cancel(self) -> bool:
        """Cancel the pending wait, if any. Returns True if one was cancelled."""
        if not self.pending:
            self._pending = None
            return False
        self._pending.cancel()
        self._pending = None
        return True

    async def _wait_then_fire(self) -> None:
        await asyncio.sleep(self.delay)
        # From here on the callback belongs to its own task and cannot be
        # cancelled through this timer.
        self._pending = None
        self._fired.spawn(self._callback())

    async def join(self) -> None:
        """Wait until every fired callback has finished."""
        await self._fired.wait()


class PeriodicTimer:
    """Invoke a callback every *interval* seconds until stopped."""

    def __init__(self, interval: float, callback: AsyncCallback):
        self.interval = interval
        self._callback = callback
        self._loop_task: asyncio.Task | None = None
        self._ticks = TaskSet()

    @property
    def interval(self) -> float:
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Change the period. A running loop picks it up after its current wait."""
        if value <= 0:
            raise ValueError("interval must be positive")
        self._interval = value

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def start(self) -> None:
        """Start ticking. The first tick happens after one full interval."""
        self.stop()
        self._loop_task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        """Stop ticking. Callbacks already running are left to finish."""
        if self._loop_task is not None:
            self._loop_task.cancel()
            self._loop_task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self._ticks.spawn(self._callback())

    async def join(self) -> None:
        """Wait until every tick callback spawned so far has finished."""
        await self._ticks.wait()
