"""Terminal UI for codexchat.

Module structure (each module hides a design decision):
- widgets.py: Section/message rendering, input bar, log panel
- styles.py: CSS styling (layout decisions)
- themes.py: Color palette
- app.py: Application orchestration (user interaction flow)
"""

from .app import CodexChatApp, run_chat_tui
from .widgets import ChatHistoryWidget, ChatInputBar, LogPanel, MessageView, PanelLogHandler

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "CodexChatApp",
    "LogPanel",
    "MessageView",
    "PanelLogHandler",
    "run_chat_tui",
]
