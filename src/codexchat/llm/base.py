from abc import ABC, abstractmethod
from typing import Any

from .models import ChatMessage, LLMResponse


class LLMProvider(ABC):
    """A vendor chat API that turns messages into one reply.

    This module hides the design decision of which vendor answers a prompt.
    Subclasses own their SDK client, translate ChatMessage lists into the
    vendor's request format and smooth over vendor quirks. They let SDK
    exceptions propagate; callers decide how a failure is shown.

    Providers are async context managers:
        async with provider:
            text = await provider.complete("Hello")
    """

    @property
    @abstractmethod
    def model(self) -> str:
        """Model used when a request names none."""

    @abstractmethod
    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Generate one reply for a conversation.

        Args:
            messages: Conversation so far, oldest first
            model: Override for the default model
            temperature: Sampling temperature
            max_tokens: Reply length cap (None leaves the vendor default)
            **kwargs: Vendor-specific sampling options

        Returns:
            The reply text with model name and token usage
        """

    async def complete(self, prompt: str, **kwargs: Any) -> str:
        """Send a single user prompt and return only the reply text."""
        response = await self.chat_completion([ChatMessage(role="user", content=prompt)], **kwargs)
        return response.content

    @abstractmethod
    async def close(self) -> None:
        """Release the SDK client."""

    async def __aenter__(self) -> "LLMProvider":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        try:
            await self.close()
        except RuntimeError as e:
            # httpx transports may already be gone when the loop shuts down
            if "Event loop is closed" not in str(e):
                raise
