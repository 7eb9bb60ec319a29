"""Reveal engine: simulated incremental display of a complete response.

The full text is already known when a reveal starts. The engine splits it into
word chunks and appends one chunk per tick to the target message, then
finalizes the message with the original text. One repeating task per message
id, kept in a mapping and removed on completion or stop.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from functools import partial

from ..config import CHUNK_SIZE, WORD_DELAY_MS
from ..conversation import ConversationStore
from ..errors import AlreadyRevealingError, ChatError
from .scheduler import RepeatingTask, Scheduler

logger = logging.getLogger(__name__)


class RevealOutcome(str, Enum):
    """How a reveal ended."""

    COMPLETED = "completed"
    STOPPED = "stopped"


FinishCallback = Callable[[str, RevealOutcome], None]


def chunk_words(text: str, chunk_size: int = CHUNK_SIZE) -> list[str]:
    """Group the words of `text` into display chunks.

    Each chunk is its words joined by single spaces plus a trailing space.
    The last chunk may hold fewer than `chunk_size` words.

    Raises:
        ValueError: If chunk_size is less than 1
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
    words = text.split()
    return [
        " ".join(words[start:start + chunk_size]) + " "
        for start in range(0, len(words), chunk_size)
    ]


@dataclass
class RevealState:
    """Progress of one reveal. Owned by the engine; observers read only."""

    message_id: str
    full_text: str
    pending_chunks: list[str]
    cursor: int = 0
    running: bool = True
    task: RepeatingTask | None = field(default=None, repr=False)
    on_finish: FinishCallback | None = field(default=None, repr=False)

    @property
    def emitted(self) -> list[str]:
        """Chunks already written to the message."""
        return self.pending_chunks[:self.cursor]


class RevealEngine:
    """Drives reveals for any number of messages at once."""

    def __init__(self, store: ConversationStore, scheduler: Scheduler) -> None:
        self._store = store
        self._scheduler = scheduler
        self._reveals: dict[str, RevealState] = {}

    @property
    def active(self) -> bool:
        """Whether any reveal is running."""
        return bool(self._reveals)

    @property
    def active_ids(self) -> list[str]:
        return list(self._reveals)

    def is_revealing(self, message_id: str) -> bool:
        return message_id in self._reveals

    def start_reveal(
        self,
        message_id: str,
        full_text: str,
        chunk_size: int = CHUNK_SIZE,
        word_delay_ms: int = WORD_DELAY_MS,
        on_finish: FinishCallback | None = None,
    ) -> RevealState:
        """Begin revealing `full_text` into a message.

        The message is reopened (content cleared, completed reset) and then
        receives one chunk every `word_delay_ms`. Empty text completes at once.

        Args:
            message_id: Target message
            full_text: Complete response text
            chunk_size: Words per chunk
            word_delay_ms: Milliseconds between chunks
            on_finish: Called with (message_id, outcome) when the reveal ends

        Returns:
            The reveal state

        Raises:
            AlreadyRevealingError: If this message is already being revealed
            UnknownMessageError: If the message does not exist
        """
        if message_id in self._reveals:
            raise AlreadyRevealingError(message_id)

        chunks = chunk_words(full_text, chunk_size)
        self._store.reopen(message_id)
        state = RevealState(
            message_id=message_id,
            full_text=full_text,
            pending_chunks=chunks,
            on_finish=on_finish,
        )

        if not chunks:
            self._complete(state)
            return state

        self._reveals[message_id] = state
        state.task = self._scheduler.every(word_delay_ms, partial(self._tick, state))
        logger.debug("Revealing %d chunk(s) into %s", len(chunks), message_id)
        return state

    def _tick(self, state: RevealState) -> None:
        if not state.running:
            return
        try:
            if state.cursor < len(state.pending_chunks):
                self._store.append_content(state.message_id, state.pending_chunks[state.cursor])
                state.cursor += 1
            else:
                self._complete(state)
        except ChatError:
            # The message was removed or finalized behind the engine's back
            self._release(state)
            raise

    def _complete(self, state: RevealState) -> None:
        self._release(state)
        # The original text, not the joined chunks, so whitespace is preserved
        self._store.mark_completed(state.message_id, state.full_text)
        logger.debug("Reveal completed for %s", state.message_id)
        if state.on_finish is not None:
            state.on_finish(state.message_id, RevealOutcome.COMPLETED)

    def _release(self, state: RevealState) -> None:
        state.running = False
        if state.task is not None:
            state.task.cancel()
            state.task = None
        if self._reveals.get(state.message_id) is state:
            del self._reveals[state.message_id]

    def stop_reveal(self, message_id: str) -> bool:
        """Stop a reveal, keeping the content emitted so far.

        The message stays incomplete. A stopped reveal cannot be resumed.

        Returns:
            True if a reveal was running, False otherwise
        """
        state = self._reveals.get(message_id)
        if state is None:
            return False

        self._release(state)
        state.pending_chunks = state.emitted
        logger.debug("Reveal stopped for %s after %d chunk(s)", message_id, state.cursor)
        if state.on_finish is not None:
            state.on_finish(message_id, RevealOutcome.STOPPED)
        return True

    def stop_all(self) -> list[str]:
        """Stop every running reveal.

        Returns:
            Ids of the messages whose reveal was stopped
        """
        return [message_id for message_id in list(self._reveals) if self.stop_reveal(message_id)]
