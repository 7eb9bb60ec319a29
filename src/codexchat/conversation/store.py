"""Conversation store: the ordered message log and its section partition.

This module hides how messages are kept and how sections are derived.
Sections are never stored; every call to partition() rebuilds them from the
log, so they cannot go stale.
"""

import logging
from collections.abc import Callable, Iterator

from ..errors import InvalidStateError, UnknownMessageError
from .models import Message, Role, Section

logger = logging.getLogger(__name__)

Listener = Callable[[Message], None]


def _starts_section(previous: Message | None, message: Message) -> bool:
    """Whether a new section begins between two adjacent messages.

    The first message always opens section 0 implicitly, so its flag is
    ignored.
    """
    return previous is not None and message.section_boundary


class ConversationStore:
    """Ordered log of chat messages.

    Mutations notify registered listeners with the affected message so a UI
    can re-render just that message.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._index: dict[str, Message] = {}
        self._listeners: list[Listener] = []

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._index

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of the log in order."""
        return tuple(self._messages)

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, message: Message) -> None:
        for listener in list(self._listeners):
            listener(message)

    def get(self, message_id: str) -> Message:
        """Look up a message by id.

        Raises:
            UnknownMessageError: If no message has this id
        """
        try:
            return self._index[message_id]
        except KeyError:
            raise UnknownMessageError(message_id) from None

    def append(self, message: Message) -> Message:
        """Add a message to the end of the log.

        Every user message after the first is flagged as a section boundary.

        Raises:
            ValueError: If a message with the same id is already in the log
        """
        if message.id in self._index:
            raise ValueError(f"Duplicate message id: {message.id}")

        if self._messages and message.role is Role.USER:
            message.section_boundary = True

        self._messages.append(message)
        self._index[message.id] = message
        logger.debug("Appended %s message %s", message.role.value, message.id)
        self._notify(message)
        return message

    def partition(self) -> list[Section]:
        """Split the log into display sections.

        Returns:
            Sections in order; empty when the log is empty. The last
            section is the active one.
        """
        runs: list[list[Message]] = []
        previous: Message | None = None
        for message in self._messages:
            if not runs or _starts_section(previous, message):
                runs.append([])
            runs[-1].append(message)
            previous = message

        last = len(runs) - 1
        return [
            Section(
                index=i,
                messages=tuple(run),
                is_new_section=i > 0,
                is_active=i == last,
            )
            for i, run in enumerate(runs)
        ]

    @property
    def active_section(self) -> Section | None:
        """The most recently started section, if any."""
        sections = self.partition()
        return sections[-1] if sections else None

    def last_reply(self) -> Message | None:
        """The most recent system message, if any."""
        for message in reversed(self._messages):
            if message.role is Role.SYSTEM:
                return message
        return None

    def prompt_for(self, message_id: str) -> Message | None:
        """The nearest user message before the given message."""
        target = self.get(message_id)
        position = next(i for i, message in enumerate(self._messages) if message is target)
        for message in reversed(self._messages[:position]):
            if message.role is Role.USER:
                return message
        return None

    def _writable(self, message_id: str) -> Message:
        message = self.get(message_id)
        if message.completed:
            raise InvalidStateError(f"Message {message_id} is completed; reopen it before writing")
        return message

    def set_content(self, message_id: str, content: str) -> None:
        """Replace the content of an unfinished message."""
        message = self._writable(message_id)
        message.content = content
        self._notify(message)

    def append_content(self, message_id: str, text: str) -> None:
        """Append text to an unfinished message."""
        message = self._writable(message_id)
        message.content += text
        self._notify(message)

    def mark_completed(self, message_id: str, final_text: str) -> None:
        """Finalize a message with its full text.

        Repeating the call with the same text is a no-op.

        Raises:
            InvalidStateError: If the message is already completed with
                different text
        """
        message = self.get(message_id)
        if message.completed:
            if message.content == final_text:
                return
            raise InvalidStateError(
                f"Message {message_id} is already completed with different content"
            )
        message.content = final_text
        message.completed = True
        logger.debug("Completed message %s (%d chars)", message_id, len(final_text))
        self._notify(message)

    def reopen(self, message_id: str) -> Message:
        """Clear a message for a new reveal cycle (the regenerate path)."""
        message = self.get(message_id)
        message.completed = False
        message.content = ""
        self._notify(message)
        return message

    def toggle_upvote(self, message_id: str) -> Message:
        """Flip the upvote; an upvote clears any downvote."""
        message = self.get(message_id)
        message.upvoted = not message.upvoted
        message.downvoted = False
        self._notify(message)
        return message

    def toggle_downvote(self, message_id: str) -> Message:
        """Flip the downvote; a downvote clears any upvote."""
        message = self.get(message_id)
        message.downvoted = not message.downvoted
        message.upvoted = False
        self._notify(message)
        return message

    def clear(self) -> None:
        """Drop every message (new chat)."""
        self._messages.clear()
        self._index.clear()
