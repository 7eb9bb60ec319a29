from typing import Any

from .base import LLMProvider
from .providers import GeminiProvider, OpenAIProvider

SUPPORTED_PROVIDERS = ("openai", "gemini")

_PROVIDER_CLASSES: dict[str, type[LLMProvider]] = {
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
}


def create_llm_provider(provider: str, **config: Any) -> LLMProvider:
    """Build the provider for a backend route.

    Args:
        provider: 'openai' or 'gemini' (case-insensitive)
        **config: Constructor arguments; `api_key` is required for both.
            OpenAI also takes model, base_url and organization; Gemini takes
            model and max_retries.

    Returns:
        A ready-to-use provider

    Raises:
        ValueError: If the provider name is not supported
        TypeError: If api_key is missing or empty

    Examples:
        >>> gemini = create_llm_provider("gemini", api_key="...", model="gemini-2.0-flash")
    """
    name = provider.lower()
    provider_class = _PROVIDER_CLASSES.get(name)
    if provider_class is None:
        raise ValueError(
            f"Unsupported provider: {provider}. "
            f"Supported providers: {', '.join(repr(n) for n in SUPPORTED_PROVIDERS)}"
        )
    if not config.get("api_key"):
        raise TypeError(f"{provider_class.__name__} requires 'api_key' in config")
    return provider_class(**config)
