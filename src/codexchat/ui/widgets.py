"""Custom Textual widgets for the chat UI.

Hides widget implementation details:
- Section and message rendering
- Input history management
- Log rendering
"""

import logging
import threading
from datetime import datetime

from rich.markup import escape
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.message import Message as TextualMessage
from textual.widgets import Button, Input, RichLog, Static

from ..conversation import Message, Section

PENDING_PLACEHOLDER = " "


class MessageView(Static):
    """One chat message. Re-renders from the shared Message object."""

    def __init__(self, message: Message, **kwargs) -> None:
        role_class = "user-message" if message.is_user else "system-message"
        super().__init__(classes=f"chat-message {role_class}", **kwargs)
        self._message = message

    @property
    def message(self) -> Message:
        return self._message

    def on_mount(self) -> None:
        self.refresh_message()

    def _header(self) -> str:
        if self._message.is_user:
            return "[bold]> You[/]"
        marks = []
        if self._message.upvoted:
            marks.append("[green]+1[/]")
        if self._message.downvoted:
            marks.append("[red]-1[/]")
        if not self._message.completed:
            marks.append("[dim]...[/]")
        suffix = f"  {' '.join(marks)}" if marks else ""
        return f"[bold]< Assistant[/]{suffix}"

    def refresh_message(self) -> None:
        content = escape(self._message.content) or PENDING_PLACEHOLDER
        self.update(f"{self._header()}\n{content}")


class SectionView(Vertical):
    """A run of messages that starts at a user prompt."""


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history grouped into sections."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._sections: dict[int, SectionView] = {}
        self._views: dict[str, MessageView] = {}

    def sync(self, sections: list[Section]) -> None:
        """Bring the display in line with the current partition.

        Mounts sections and messages that are new and re-renders the rest.
        """
        message_count = 0
        for section in sections:
            message_count += len(section)
            view = self._sections.get(section.index)
            if view is None:
                children = [self._new_view(message) for message in section.messages]
                view = SectionView(*children, id=section.id, classes="chat-section")
                self._sections[section.index] = view
                self.mount(view)
            else:
                for message in section.messages:
                    existing = self._views.get(message.id)
                    if existing is None:
                        view.mount(self._new_view(message))
                    elif existing.is_mounted:
                        existing.refresh_message()
            view.set_class(section.is_active, "-active")

        self.border_subtitle = f"{len(sections)} sections | {message_count} messages"
        self.scroll_end(animate=False)

    def _new_view(self, message: Message) -> MessageView:
        view = MessageView(message)
        self._views[message.id] = view
        return view

    def clear_history(self) -> None:
        """Remove every section."""
        self._sections.clear()
        self._views.clear()
        self.remove_children()
        self.border_subtitle = "Conversation history"


class HistoryInput(Input):
    """Input widget with prompt history on Up/Down."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1
        self._current_input: str = ""

    def _on_key(self, event) -> None:
        if event.key == "up":
            if self._history:
                if self._history_index == -1:
                    self._current_input = self.value
                    self._history_index = len(self._history) - 1
                elif self._history_index > 0:
                    self._history_index -= 1
                self.value = self._history[self._history_index]
                self.cursor_position = len(self.value)
            event.prevent_default()
            event.stop()
        elif event.key == "down":
            if self._history_index != -1:
                if self._history_index < len(self._history) - 1:
                    self._history_index += 1
                    self.value = self._history[self._history_index]
                else:
                    self._history_index = -1
                    self.value = self._current_input
                self.cursor_position = len(self.value)
            event.prevent_default()
            event.stop()

    def add_to_history(self, prompt: str) -> None:
        if prompt and (not self._history or self._history[-1] != prompt):
            self._history.append(prompt)
        self._history_index = -1
        self._current_input = ""


class ChatInputBar(Horizontal):
    """Prompt input with a Send/Stop button."""

    class Submitted(TextualMessage):
        """Posted when the user submits a prompt."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    class StopRequested(TextualMessage):
        """Posted when the user presses Stop."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._streaming = False

    def compose(self):
        yield HistoryInput(placeholder="Ask anything", id="chat-input")
        yield Button("Send", id="send-btn", variant="success")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if self._streaming:
            self.post_message(self.StopRequested())
        else:
            self._submit()

    def _submit(self) -> None:
        if self._streaming:
            return
        text_input = self.query_one("#chat-input", HistoryInput)
        value = text_input.value.strip()
        if value:
            text_input.add_to_history(value)
            text_input.value = ""
            self.post_message(self.Submitted(value))

    def set_streaming(self, streaming: bool) -> None:
        """Lock the input while a reply is in progress."""
        if streaming == self._streaming:
            return
        self._streaming = streaming
        button = self.query_one("#send-btn", Button)
        button.label = "Stop" if streaming else "Send"
        button.variant = "error" if streaming else "success"
        text_input = self.query_one("#chat-input", HistoryInput)
        text_input.disabled = streaming
        if not streaming:
            text_input.focus()

    def focus_input(self) -> None:
        self.query_one("#chat-input", HistoryInput).focus()


class LogPanel(RichLog):
    """Log panel fed by the codexchat loggers. Hidden until toggled."""

    BORDER_TITLE = "Log"

    LEVEL_COLORS = {
        logging.DEBUG: "dim white",
        logging.INFO: "cyan",
        logging.WARNING: "yellow",
        logging.ERROR: "red",
        logging.CRITICAL: "bold red",
    }

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, markup=True, highlight=False, auto_scroll=True, wrap=True, **kwargs)

    def on_mount(self) -> None:
        self.display = False

    def toggle(self) -> bool:
        """Toggle visibility and return the new state."""
        self.display = not self.display
        return self.display

    def add_record(self, record: logging.LogRecord, text: str) -> None:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        color = self.LEVEL_COLORS.get(record.levelno, "white")
        component = record.name.rsplit(".", 1)[-1]
        self.write(
            f"[dim]{timestamp}[/] [{color}]{record.levelname:<7}[/] "
            f"[magenta][{component}][/] {escape(text)}"
        )


class PanelLogHandler(logging.Handler):
    """Logging handler that writes records into a LogPanel.

    Uses call_from_thread when a record is emitted off the UI thread.
    """

    def __init__(self, panel: LogPanel, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._panel = panel

    def emit(self, record: logging.LogRecord) -> None:
        try:
            text = self.format(record)
            app = self._panel.app
            if app._thread_id != threading.get_ident():
                app.call_from_thread(self._panel.add_record, record, text)
            else:
                self._panel.add_record(record, text)
        except Exception:
            self.handleError(record)
