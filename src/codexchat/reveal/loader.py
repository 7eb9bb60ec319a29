"""Loading indicator shown while a completion request is in flight."""

import logging
from functools import partial

from ..config import LOADER_FRAMES, LOADER_INTERVAL_MS
from ..conversation import ConversationStore
from ..errors import ChatError
from .scheduler import RepeatingTask, Scheduler

logger = logging.getLogger(__name__)


class LoadingIndicator:
    """Cycles placeholder dots into pending messages.

    Each message gets its own repeating task. cancel() must be called before
    the real response is revealed, otherwise a late frame would overwrite it.
    """

    def __init__(
        self,
        store: ConversationStore,
        scheduler: Scheduler,
        interval_ms: int = LOADER_INTERVAL_MS,
        frames: tuple[str, ...] = LOADER_FRAMES,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._interval_ms = interval_ms
        self._frames = frames
        self._tasks: dict[str, RepeatingTask] = {}
        self._positions: dict[str, int] = {}

    def is_running(self, message_id: str) -> bool:
        return message_id in self._tasks

    def start(self, message_id: str) -> None:
        """Start animating a message. Restarts from the first frame if running."""
        self.cancel(message_id)
        self._positions[message_id] = 0
        self._store.set_content(message_id, self._frames[0])
        self._tasks[message_id] = self._scheduler.every(
            self._interval_ms, partial(self._advance, message_id)
        )

    def _advance(self, message_id: str) -> None:
        if message_id not in self._tasks:
            return
        position = (self._positions[message_id] + 1) % len(self._frames)
        self._positions[message_id] = position
        try:
            self._store.set_content(message_id, self._frames[position])
        except ChatError:
            self.cancel(message_id)
            raise

    def cancel(self, message_id: str) -> bool:
        """Stop animating a message, leaving its content as is.

        Returns:
            True if the indicator was running
        """
        task = self._tasks.pop(message_id, None)
        self._positions.pop(message_id, None)
        if task is None:
            return False
        task.cancel()
        logger.debug("Loader cancelled for %s", message_id)
        return True
