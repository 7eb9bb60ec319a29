"""Chat session: the lifecycle of one prompt and its reply.

Ties the conversation store, loading indicator, completion source and reveal
engine together:

    submit -> user message -> pending reply -> loader -> fetch
           -> loader cancelled -> reveal -> completed (or stopped)

Requests are tracked per reply id with a token. stop() drops the token, so a
request that resolves afterwards is discarded instead of reviving the reply.
"""

import asyncio
import logging

from ..client import CompletionSource
from ..config import (
    CHUNK_SIZE,
    FALLBACK_REPLY,
    LOADER_INTERVAL_MS,
    TIMEOUT_REPLY,
    WORD_DELAY_MS,
)
from ..conversation import ConversationStore, Message, Role
from ..errors import (
    InvalidStateError,
    ProviderError,
    RequestTimedOut,
    SessionBusyError,
    UnknownMessageError,
)
from ..reveal import AsyncioScheduler, LoadingIndicator, RevealEngine, RevealOutcome, Scheduler

logger = logging.getLogger(__name__)


class ChatSession:
    """One conversation with a completion source."""

    def __init__(
        self,
        completion: CompletionSource,
        scheduler: Scheduler | None = None,
        store: ConversationStore | None = None,
        chunk_size: int = CHUNK_SIZE,
        word_delay_ms: int = WORD_DELAY_MS,
        loader_interval_ms: int = LOADER_INTERVAL_MS,
        request_timeout: float | None = None,
        fallback_reply: str = FALLBACK_REPLY,
        timeout_reply: str = TIMEOUT_REPLY,
    ) -> None:
        """Initialize the session.

        Args:
            completion: Source of reply text
            scheduler: Timer source for the loader and reveal (default: asyncio)
            store: Conversation store to write into (default: a new one)
            chunk_size: Words per reveal chunk
            word_delay_ms: Milliseconds between reveal chunks
            loader_interval_ms: Milliseconds between loader frames
            request_timeout: Seconds to wait for a reply (None waits forever)
            fallback_reply: Text shown when the provider fails
            timeout_reply: Text shown when the request times out
        """
        self._completion = completion
        self._scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self.store = store if store is not None else ConversationStore()
        self.engine = RevealEngine(self.store, self._scheduler)
        self.loader = LoadingIndicator(self.store, self._scheduler, interval_ms=loader_interval_ms)
        self._chunk_size = chunk_size
        self._word_delay_ms = word_delay_ms
        self._request_timeout = request_timeout
        self._fallback_reply = fallback_reply
        self._timeout_reply = timeout_reply
        self._pending: dict[str, object] = {}
        self._outcomes: dict[str, asyncio.Future[RevealOutcome]] = {}

    @property
    def is_streaming(self) -> bool:
        """Whether a reply is loading or being revealed. Input is refused meanwhile."""
        return bool(self._pending) or self.engine.active

    async def submit(self, prompt: str) -> Message:
        """Send a prompt and start revealing the reply.

        Returns once the reply is being revealed (or was finalized with a
        fallback). Use wait_for_reveal() to wait for the reveal to end.

        Returns:
            The system message that receives the reply

        Raises:
            ValueError: If the prompt is blank
            SessionBusyError: If a reply is still in progress
        """
        text = prompt.strip()
        if not text:
            raise ValueError("Prompt must not be empty")
        if self.is_streaming:
            raise SessionBusyError()

        self.store.append(Message.user(text))
        reply = self.store.append(Message.system())
        await self._respond(reply.id, text)
        return reply

    async def regenerate(self, message_id: str) -> Message:
        """Ask again for an existing reply, reusing its message id.

        The prompt is the nearest user message before the reply.

        Raises:
            InvalidStateError: If the message is not a reply or has no prompt
            SessionBusyError: If a reply is still in progress
        """
        message = self.store.get(message_id)
        if message.role is not Role.SYSTEM:
            raise InvalidStateError(f"Only replies can be regenerated, {message_id} is a user message")
        prompt = self.store.prompt_for(message_id)
        if prompt is None:
            raise InvalidStateError(f"No prompt precedes message {message_id}")
        if self.is_streaming:
            raise SessionBusyError()

        self.store.reopen(message_id)
        await self._respond(message_id, prompt.content)
        return message

    async def _respond(self, message_id: str, prompt: str) -> None:
        token = object()
        self._pending[message_id] = token
        self._outcomes[message_id] = asyncio.get_running_loop().create_future()
        self.loader.start(message_id)

        failure: ProviderError | None = None
        text = ""
        try:
            text = await self._fetch(prompt)
        except ProviderError as e:
            failure = e
        except BaseException:
            if self._pending.get(message_id) is token:
                del self._pending[message_id]
                self.loader.cancel(message_id)
                self._resolve(message_id, RevealOutcome.STOPPED)
            raise

        if self._pending.get(message_id) is not token:
            # stop() already cancelled the loader; a newer request may own it now
            logger.info("Discarding reply for %s: request was stopped", message_id)
            return
        del self._pending[message_id]
        # Before the reveal starts, so no loader frame lands in real content
        self.loader.cancel(message_id)

        if failure is not None:
            logger.warning("Completion failed for %s: %s", message_id, failure)
            reply = self._timeout_reply if isinstance(failure, RequestTimedOut) else self._fallback_reply
            self.store.mark_completed(message_id, reply)
            self._resolve(message_id, RevealOutcome.COMPLETED)
            return

        self.engine.start_reveal(
            message_id,
            text,
            chunk_size=self._chunk_size,
            word_delay_ms=self._word_delay_ms,
            on_finish=self._resolve,
        )

    async def _fetch(self, prompt: str) -> str:
        if self._request_timeout is None:
            return await self._completion.complete(prompt)
        try:
            return await asyncio.wait_for(self._completion.complete(prompt), self._request_timeout)
        except asyncio.TimeoutError as e:
            raise RequestTimedOut(self._request_timeout) from e

    def _resolve(self, message_id: str, outcome: RevealOutcome) -> None:
        future = self._outcomes.get(message_id)
        if future is not None and not future.done():
            future.set_result(outcome)

    async def wait_for_reveal(self, message_id: str) -> RevealOutcome:
        """Wait until the reply for a message is completed or stopped.

        Raises:
            UnknownMessageError: If no reply was ever requested for this id
        """
        future = self._outcomes.get(message_id)
        if future is None:
            raise UnknownMessageError(message_id)
        return await asyncio.shield(future)

    def stop(self) -> list[str]:
        """Stop every loading or revealing reply.

        Revealed text stays as emitted; replies stopped while loading are left
        empty. Stopped replies stay incomplete.

        Returns:
            Ids of the replies that were stopped
        """
        stopped = []
        for message_id in list(self._pending):
            del self._pending[message_id]
            self.loader.cancel(message_id)
            self.store.set_content(message_id, "")
            self._resolve(message_id, RevealOutcome.STOPPED)
            stopped.append(message_id)
        stopped.extend(self.engine.stop_all())
        if stopped:
            logger.info("Stopped %d reply(ies)", len(stopped))
        return stopped

    def upvote(self, message_id: str) -> Message:
        return self.store.toggle_upvote(message_id)

    def downvote(self, message_id: str) -> Message:
        return self.store.toggle_downvote(message_id)

    def new_chat(self) -> None:
        """Stop anything in flight and start an empty conversation."""
        self.stop()
        self.store.clear()
        self._outcomes.clear()

    async def close(self) -> None:
        self.stop()
        await self._completion.close()
