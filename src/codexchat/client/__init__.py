"""Completion sources used by the chat session."""

from .backend import HTTPCompletionClient
from .base import CompletionSource
from .direct import ProviderCompletion

__all__ = [
    "CompletionSource",
    "HTTPCompletionClient",
    "ProviderCompletion",
]
