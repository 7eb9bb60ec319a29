"""Theme definitions for the chat UI.

To add a new theme, define it here and register it in the app.
"""

from textual.theme import Theme

# Light slate palette
CODEX_SLATE = Theme(
    name="codex-slate",
    primary="#2563eb",      # Blue - chat border and focus
    secondary="#7c3aed",    # Violet - assistant messages
    accent="#d97706",       # Amber - active section marker
    foreground="#1f2937",   # Gray 800 - text
    background="#f9fafb",   # Gray 50 - screen
    success="#059669",      # Emerald - user messages
    warning="#ca8a04",      # Yellow - log panel
    error="#dc2626",        # Red - stop button
    surface="#ffffff",
    panel="#f3f4f6",        # Gray 100 - panel backgrounds
    dark=False,
    variables={
        "border": "#d1d5db",
        "border-blurred": "#e5e7eb",
        "text-muted": "#6b7280",
        "footer-key-foreground": "#2563eb",
    },
)
