"""Repeating-task scheduling.

Hides the design decision of how timed callbacks are driven. The reveal
engine and the loading indicator only see Scheduler.every() and the
cancellable handle it returns, so they run the same on the asyncio event
loop and on a manually advanced clock.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable


class RepeatingTask(ABC):
    """Handle to a callback that fires every interval until cancelled."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop future firings. Safe to call more than once."""

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        """Whether cancel() has been called."""


class Scheduler(ABC):
    """Factory for repeating tasks."""

    @abstractmethod
    def every(self, interval_ms: int, callback: Callable[[], None]) -> RepeatingTask:
        """Call `callback` every `interval_ms` milliseconds.

        The first call happens one interval from now. The callback may cancel
        its own task. A callback that raises cancels its task.
        """


class _LoopTask(RepeatingTask):
    """Repeating task built from a chain of loop.call_later handles."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval_ms: int,
        callback: Callable[[], None],
    ) -> None:
        self._loop = loop
        self._interval = interval_ms / 1000
        self._callback = callback
        self._cancelled = False
        self._handle: asyncio.TimerHandle | None = loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        # Schedule the next firing first so the callback can cancel it
        self._handle = self._loop.call_later(self._interval, self._fire)
        try:
            self._callback()
        except BaseException:
            self.cancel()
            raise

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler(Scheduler):
    """Scheduler driven by the asyncio event loop.

    Args:
        loop: Loop to schedule on. Defaults to the running loop at the time
            every() is called.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def every(self, interval_ms: int, callback: Callable[[], None]) -> RepeatingTask:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        loop = self._loop or asyncio.get_running_loop()
        return _LoopTask(loop, interval_ms, callback)
