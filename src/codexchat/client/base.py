from abc import ABC, abstractmethod


class CompletionSource(ABC):
    """Where the chat session gets its replies from.

    Implementations turn every failure into ProviderError (or its
    RequestTimedOut subclass) so the session can show a fallback reply.
    """

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Return the full reply text for a prompt.

        Raises:
            ProviderError: If the provider fails or answers with a malformed payload
        """

    async def close(self) -> None:
        """Release any open connections."""

    async def __aenter__(self) -> "CompletionSource":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
