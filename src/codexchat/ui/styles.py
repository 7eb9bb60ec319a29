"""CSS styles for the chat UI.

Hides layout and styling decisions from the application logic.
"""

APP_CSS = """
Screen {
    layout: vertical;
    background: $background;
}

#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;
}

.chat-section {
    height: auto;
    margin: 0 0 1 0;
    border-left: blank;

    &.-active {
        border-left: outer $accent 40%;
    }
}

.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 2;
}

.user-message {
    border-left: tall $success;
    background: $success 8%;
}

.system-message {
    border-left: tall $secondary;
    background: $secondary 8%;
}

#log-panel {
    height: auto;
    min-height: 6;
    max-height: 12;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    padding: 0 1;
}

#chat-input-bar {
    height: auto;
    padding: 0 1;

    #chat-input {
        width: 1fr;
    }

    #send-btn {
        min-width: 10;
        margin-left: 1;
    }
}
"""
