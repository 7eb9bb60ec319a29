"""Google Gemini chat provider.

Uses the google-genai SDK's async client (`client.aio`).

Gemini sometimes answers with no text at all (safety filtering, transient
service trouble). Such answers are retried with a short linear backoff; if
every attempt is empty the reply is "".
"""

import asyncio
import logging
from typing import Any

from google import genai
from google.genai import types

from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse

logger = logging.getLogger(__name__)

RETRY_BACKOFF_SECONDS = 0.5


class GeminiProvider(LLMProvider):
    """Gemini provider behind the /gemini route.

    Hidden design decisions:
    - genai.Client construction
    - Role mapping: assistant turns become "model", system text becomes the
      system instruction
    - Pulling text out of candidates, and the empty-answer retry
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        max_retries: int = 3,
        **client_kwargs: Any
    ):
        """Create the provider.

        Args:
            api_key: Google AI Studio key
            model: Model used when a request names none
            max_retries: Total attempts when Gemini returns no text
            **client_kwargs: Passed through to genai.Client
        """
        self._model = model
        self._attempts = max(1, max_retries)
        self._client = genai.Client(api_key=api_key, **client_kwargs)

    @property
    def model(self) -> str:
        return self._model

    def _convert_messages(self, messages: list[ChatMessage]) -> tuple[str | None, list[types.Content]]:
        """Split messages into (system instruction, conversation contents)."""
        instruction = None
        contents = []
        for message in messages:
            if message.role == "system":
                instruction = message.content
                continue
            role = "model" if message.role == "assistant" else "user"
            contents.append(types.Content(role=role, parts=[types.Part(text=message.content)]))
        return instruction, contents

    @staticmethod
    def _text_of(response: Any) -> str:
        """Concatenated text parts of the first candidate, or ""."""
        for candidate in (response.candidates or [])[:1]:
            parts = candidate.content.parts if candidate.content else None
            text = "".join(part.text for part in parts or [] if getattr(part, "text", None))
            if text:
                return text
        try:
            return response.text or ""
        except (ValueError, AttributeError):
            return ""

    @staticmethod
    def _usage(response: Any) -> dict[str, int] | None:
        meta = response.usage_metadata
        if meta is None:
            return None
        return {
            "prompt_tokens": meta.prompt_token_count or 0,
            "completion_tokens": meta.candidates_token_count or 0,
            "total_tokens": meta.total_token_count or 0,
        }

    async def chat_completion(
        self,
        messages: list[ChatMessage],
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs: Any
    ) -> LLMResponse:
        """Ask Gemini for one reply.

        Extra keyword arguments become GenerateContentConfig fields.
        """
        model_name = model or self._model
        instruction, contents = self._convert_messages(messages)
        config = types.GenerateContentConfig(
            temperature=temperature,
            system_instruction=instruction,
            max_output_tokens=max_tokens,
            **kwargs
        )

        text, usage = "", None
        for attempt in range(1, self._attempts + 1):
            response = await self._client.aio.models.generate_content(
                model=model_name,
                contents=contents,
                config=config
            )
            text, usage = self._text_of(response), self._usage(response) or usage
            if text:
                break
            if attempt < self._attempts:
                logger.debug("Gemini returned no text, retrying (%d/%d)", attempt, self._attempts)
                await asyncio.sleep(RETRY_BACKOFF_SECONDS * attempt)

        if not text:
            logger.warning("Gemini returned no text after %d attempt(s)", self._attempts)
        return LLMResponse(content=text, model=model_name, usage=usage)

    async def close(self) -> None:
        """Nothing to release; genai.Client holds no open connections between calls."""
