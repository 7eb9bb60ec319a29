"""Data models for the conversation log.

Messages are mutable: the reveal engine and loader write into them in place.
Sections are read-only views rebuilt on every partition.
"""

from dataclasses import dataclass, field
from enum import Enum
from uuid import uuid4


class Role(str, Enum):
    """Who authored a message."""

    USER = "user"
    SYSTEM = "system"


def new_message_id(prefix: str = "msg") -> str:
    """Generate an opaque message id."""
    return f"{prefix}-{uuid4().hex[:12]}"


@dataclass
class Message:
    """A single entry in the conversation log."""

    role: Role
    content: str = ""
    id: str = field(default_factory=new_message_id)
    completed: bool = False
    section_boundary: bool = False
    upvoted: bool = False
    downvoted: bool = False

    @classmethod
    def user(cls, content: str) -> "Message":
        """Create a user message. User text is final on creation."""
        return cls(role=Role.USER, content=content, id=new_message_id("user"), completed=True)

    @classmethod
    def system(cls) -> "Message":
        """Create an empty, pending system reply."""
        return cls(role=Role.SYSTEM, id=new_message_id("system"))

    @property
    def is_user(self) -> bool:
        return self.role is Role.USER


@dataclass(frozen=True)
class Section:
    """A contiguous run of messages grouped for display.

    Holds references to the store's Message objects, not copies.
    """

    index: int
    messages: tuple[Message, ...]
    is_new_section: bool = False
    is_active: bool = False

    @property
    def id(self) -> str:
        return f"section-{self.index}"

    def __len__(self) -> int:
        return len(self.messages)
