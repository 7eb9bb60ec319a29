"""Conversation log and section partitioning."""

from .models import Message, Role, Section, new_message_id
from .store import ConversationStore

__all__ = [
    "ConversationStore",
    "Message",
    "Role",
    "Section",
    "new_message_id",
]
