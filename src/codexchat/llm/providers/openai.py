"""OpenAI chat provider.

Relays prompts through the Chat Completions endpoint of the official SDK.
"""

import logging
from typing import Any

from openai import AsyncOpenAI

from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse

logger = logging.getLogger(__name__)


def _usage(completion: Any) -> dict[str, int] | None:
    if completion.usage is None:
        return None
    return {
        "prompt_tokens": completion.usage.prompt_tokens,
        "completion_tokens": completion.usage.completion_tokens,
        "total_tokens": completion.usage.total_tokens,
    }


class OpenAIProvider(LLMProvider):
    """OpenAI provider behind the /openai route.

    Hidden design decisions:
    - AsyncOpenAI client setup and authentication
    - Mapping ChatMessage objects to the Chat Completions payload
    - Where the reply text lives in the SDK's response object
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str | None = None,
        organization: str | None = None,
        **client_kwargs: Any
    ):
        """Create the provider.

        Args:
            api_key: OpenAI API key
            model: Chat model used when a request names none
            base_url: Alternative API endpoint (proxies, compatible servers)
            organization: Organization to bill
            **client_kwargs: Passed through to AsyncOpenAI (timeout, max_retries, ...)
        """
        self._model = model
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            organization=organization,
            **client_kwargs
        )

    @property
    def model(self) -> str:
        return self._model

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Ask Chat Completions for one reply.

        Extra keyword arguments (top_p, frequency_penalty, presence_penalty)
        go into the request body unchanged.
        """
        payload: dict[str, Any] = {
            "model": model or self._model,
            "messages": [message.model_dump() for message in messages],
            "temperature": temperature,
            **kwargs
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        logger.debug("OpenAI request: model=%s, %d message(s)", payload["model"], len(messages))
        completion = await self._client.chat.completions.create(**payload)

        # A refusal or tool call comes back with content None
        text = completion.choices[0].message.content if completion.choices else None
        return LLMResponse(content=text or "", model=completion.model, usage=_usage(completion))

    async def close(self) -> None:
        await self._client.close()
