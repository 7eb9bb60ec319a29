import logging
from typing import Any

from ..errors import ProviderError
from ..llm import LLMProvider
from .base import CompletionSource

logger = logging.getLogger(__name__)


class ProviderCompletion(CompletionSource):
    """Completion source that calls an LLM provider in-process, skipping the backend."""

    def __init__(self, provider: LLMProvider, **completion_kwargs: Any) -> None:
        self._provider = provider
        self._completion_kwargs = completion_kwargs

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    async def complete(self, prompt: str) -> str:
        try:
            return await self._provider.complete(prompt, **self._completion_kwargs)
        except Exception as e:
            # Vendor SDKs raise their own exception types
            logger.warning("%s request failed: %s", type(self._provider).__name__, e)
            raise ProviderError(str(e) or type(e).__name__) from e

    async def close(self) -> None:
        await self._provider.close()
