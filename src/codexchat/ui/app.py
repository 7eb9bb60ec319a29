"""Main Textual chat application.

Orchestrates the UI components and forwards user actions to a ChatSession.
The session's store notifies the app on every message change; the app then
re-syncs the chat history and the input lock.
"""

import asyncio
import contextlib
import logging

import pyperclip
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from ..chat import ChatSession
from ..client import CompletionSource
from ..config import Settings
from ..conversation import Message
from ..errors import ChatError
from ..log import attach_handler
from ..reveal import AsyncioScheduler
from .styles import APP_CSS
from .themes import CODEX_SLATE
from .widgets import ChatHistoryWidget, ChatInputBar, LogPanel, PanelLogHandler

logger = logging.getLogger(__name__)


class CodexChatApp(App):
    """Textual chat UI over a completion source."""

    CSS = APP_CSS
    TITLE = "Codex Chat"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("escape", "stop_reply", "Stop"),
        Binding("ctrl+r", "regenerate", "Regenerate"),
        Binding("ctrl+u", "upvote", "Upvote"),
        Binding("ctrl+t", "downvote", "Downvote"),
        Binding("ctrl+y", "copy_reply", "Copy"),
        Binding("ctrl+n", "new_chat", "New Chat"),
        Binding("ctrl+d", "toggle_log", "Log"),
    ]

    def __init__(
        self,
        completion: CompletionSource,
        settings: Settings | None = None,
        source_label: str = "",
    ) -> None:
        super().__init__()
        self._completion = completion
        self._settings = settings or Settings()
        self._source_label = source_label
        self.session: ChatSession | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        yield LogPanel(id="log-panel")
        yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Create the session on the app's event loop and wire the store to the UI."""
        self.register_theme(CODEX_SLATE)
        self.theme = "codex-slate"

        panel = self.query_one("#log-panel", LogPanel)
        attach_handler(PanelLogHandler(panel), self._settings.log_level)

        settings = self._settings
        self.session = ChatSession(
            self._completion,
            scheduler=AsyncioScheduler(),
            chunk_size=settings.chunk_size,
            word_delay_ms=settings.word_delay_ms,
            loader_interval_ms=settings.loader_interval_ms,
            request_timeout=settings.request_timeout,
        )
        self.session.store.add_listener(self._on_message_changed)

        self.sub_title = self._source_label
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def _on_message_changed(self, message: Message) -> None:
        self._sync()

    def _sync(self) -> None:
        if self.session is None:
            return
        self.query_one("#chat-history", ChatHistoryWidget).sync(self.session.store.partition())
        self.query_one("#chat-input-bar", ChatInputBar).set_streaming(self.session.is_streaming)

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        if self.session is None or self.session.is_streaming:
            self.notify("Wait for the reply or press Esc to stop it", severity="warning", timeout=2)
            return
        self._ask(event.value)

    def on_chat_input_bar_stop_requested(self, event: ChatInputBar.StopRequested) -> None:
        self.action_stop_reply()

    @work(group="replies")
    async def _ask(self, prompt: str) -> None:
        """Submit a prompt and wait for its reveal in a background worker."""
        try:
            reply = await self.session.submit(prompt)
            await self.session.wait_for_reveal(reply.id)
        except ChatError as e:
            logger.error("Submit failed: %s", e)
            self.notify(str(e), severity="error", timeout=4)
        finally:
            self._sync()

    @work(group="replies")
    async def _regenerate(self, message_id: str) -> None:
        try:
            await self.session.regenerate(message_id)
            await self.session.wait_for_reveal(message_id)
        except ChatError as e:
            logger.error("Regenerate failed: %s", e)
            self.notify(str(e), severity="error", timeout=4)
        finally:
            self._sync()

    def _last_reply(self) -> Message | None:
        if self.session is None:
            return None
        reply = self.session.store.last_reply()
        if reply is None:
            self.notify("No reply yet", severity="warning", timeout=2)
        return reply

    def action_stop_reply(self) -> None:
        """Stop the reply that is loading or being revealed."""
        if self.session is not None and self.session.stop():
            self.notify("Stopped", severity="warning", timeout=2)
        self._sync()

    def action_regenerate(self) -> None:
        """Ask again for the last reply."""
        if self.session is not None and self.session.is_streaming:
            self.notify("Wait for the reply or press Esc to stop it", severity="warning", timeout=2)
            return
        reply = self._last_reply()
        if reply is not None:
            self._regenerate(reply.id)

    def action_upvote(self) -> None:
        reply = self._last_reply()
        if reply is not None:
            self.session.upvote(reply.id)

    def action_downvote(self) -> None:
        reply = self._last_reply()
        if reply is not None:
            self.session.downvote(reply.id)

    def action_copy_reply(self) -> None:
        """Copy the last reply to the clipboard."""
        reply = self._last_reply()
        if reply is None:
            return
        try:
            pyperclip.copy(reply.content)
            self.notify("Reply copied", timeout=2)
        except pyperclip.PyperclipException:
            self.copy_to_clipboard(reply.content)
            self.notify("Reply copied (terminal)", timeout=2)

    def action_new_chat(self) -> None:
        """Stop anything in flight and clear the conversation."""
        if self.session is None:
            return
        self.session.new_chat()
        self.query_one("#chat-history", ChatHistoryWidget).clear_history()
        self._sync()
        self.notify("New chat", timeout=2)

    def action_toggle_log(self) -> None:
        visible = self.query_one("#log-panel", LogPanel).toggle()
        self.notify(f"Log panel {'shown' if visible else 'hidden'}", timeout=2)


async def run_chat_tui(
    completion: CompletionSource,
    settings: Settings | None = None,
    source_label: str = "",
) -> None:
    """Run the chat UI until the user quits.

    Args:
        completion: Where replies come from
        settings: Runtime settings (timing, timeout, log level)
        source_label: Shown as the app subtitle
    """
    app = CodexChatApp(completion, settings=settings, source_label=source_label)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        if app.session is not None:
            app.session.stop()
        with contextlib.suppress(RuntimeError):
            await completion.close()
