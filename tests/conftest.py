"""Pytest configuration and shared fixtures."""
import asyncio
import os
from collections.abc import Callable

import pytest

from codexchat.client import CompletionSource
from codexchat.conversation import ConversationStore
from codexchat.reveal import RepeatingTask, RevealEngine, Scheduler


class ManualTask(RepeatingTask):
    """Repeating task driven by ManualScheduler.advance()."""

    def __init__(self, interval_ms: int, callback: Callable[[], None], due: int, order: int):
        self.interval_ms = interval_ms
        self.callback = callback
        self.due = due
        self.order = order
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Scheduler with a clock that only moves when a test advances it."""

    def __init__(self):
        self.now = 0
        self.tasks: list[ManualTask] = []

    def every(self, interval_ms: int, callback: Callable[[], None]) -> ManualTask:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        task = ManualTask(interval_ms, callback, self.now + interval_ms, len(self.tasks))
        self.tasks.append(task)
        return task

    @property
    def live_tasks(self) -> list[ManualTask]:
        return [task for task in self.tasks if not task.cancelled]

    def advance(self, ms: int) -> None:
        """Move the clock forward, firing due callbacks in time order."""
        target = self.now + ms
        while True:
            due = [task for task in self.live_tasks if task.due <= target]
            if not due:
                break
            task = min(due, key=lambda t: (t.due, t.order))
            self.now = task.due
            task.due += task.interval_ms
            try:
                task.callback()
            except BaseException:
                task.cancel()
                raise
        self.now = target


class FakeCompletion(CompletionSource):
    """Completion source with scripted replies.

    Args:
        replies: Texts returned in order; the last one repeats
        error: Raised instead of replying
        delay: Seconds to sleep before replying
        gate: Event awaited before replying
    """

    def __init__(
        self,
        replies: str | list[str] = "hi there friend",
        error: Exception | None = None,
        delay: float = 0.0,
        gate: asyncio.Event | None = None,
    ):
        self.replies = [replies] if isinstance(replies, str) else list(replies)
        self.error = error
        self.delay = delay
        self.gate = gate
        self.prompts: list[str] = []
        self.closed = False

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.replies[min(len(self.prompts), len(self.replies)) - 1]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "openai": os.getenv("OPENAI_API_KEY"),
        "gemini": os.getenv("GEMINI_API_KEY") or os.getenv("GEMNI_API_KEY"),
    }


@pytest.fixture
def store():
    """Return an empty conversation store."""
    return ConversationStore()


@pytest.fixture
def scheduler():
    """Return a manually advanced scheduler starting at t=0."""
    return ManualScheduler()


@pytest.fixture
def engine(store, scheduler):
    """Return a reveal engine over the store and manual scheduler."""
    return RevealEngine(store, scheduler)


@pytest.fixture
def record_contents(store):
    """Record the content of a message every time the store notifies for it."""
    def _record(message_id: str) -> list[str]:
        seen: list[str] = []

        def _listener(message):
            if message.id == message_id:
                seen.append(message.content)

        store.add_listener(_listener)
        return seen

    return _record


@pytest.fixture
def fake_completion():
    """Return the FakeCompletion class for building scripted sources."""
    return FakeCompletion
