from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """One turn of the conversation sent to a vendor API."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant", "system"] = Field(description="Who wrote the turn")
    content: str = Field(description="Turn text")


class LLMResponse(BaseModel):
    """A vendor reply."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Reply text; empty when the vendor produced none")
    model: str = Field(description="Model that answered")
    usage: dict[str, int] | None = Field(
        default=None,
        description="prompt_tokens, completion_tokens and total_tokens, when reported"
    )
