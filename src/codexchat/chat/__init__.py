"""Chat session lifecycle."""

from .session import ChatSession

__all__ = ["ChatSession"]
