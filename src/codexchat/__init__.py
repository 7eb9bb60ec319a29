"""
codexchat: chat with OpenAI or Gemini through a small relay backend.

Replies are fetched whole and then revealed a few words at a time. The
package follows Parnas's information hiding principles, where each module
hides a specific design decision:
- conversation: how messages are kept and grouped into sections
- reveal: how a complete reply is turned into a timed animation
- chat: the lifecycle of a prompt and its reply
- client / llm: where reply text comes from
- server / ui / cli: the outer surfaces
"""

__version__ = "0.1.0"

from .chat import ChatSession
from .conversation import ConversationStore, Message, Role, Section
from .errors import (
    AlreadyRevealingError,
    ChatError,
    InvalidStateError,
    ProviderError,
    RequestTimedOut,
    SessionBusyError,
    UnknownMessageError,
)
from .reveal import AsyncioScheduler, LoadingIndicator, RevealEngine, RevealOutcome, RevealState

__all__ = [
    "AlreadyRevealingError",
    "AsyncioScheduler",
    "ChatError",
    "ChatSession",
    "ConversationStore",
    "InvalidStateError",
    "LoadingIndicator",
    "Message",
    "ProviderError",
    "RequestTimedOut",
    "RevealEngine",
    "RevealOutcome",
    "RevealState",
    "Role",
    "Section",
    "SessionBusyError",
    "UnknownMessageError",
]
