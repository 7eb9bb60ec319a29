"""Provider factory functions for CLI.

Centralizes creation of LLM providers and completion sources from settings.
Hides configuration details from command implementations.
"""

from rich.console import Console

from ..client import CompletionSource, HTTPCompletionClient, ProviderCompletion
from ..config import Settings
from ..llm import SUPPORTED_PROVIDERS, LLMProvider, create_llm_provider

# Default console for output
_console = Console()


def get_llm(provider: str, settings: Settings, console: Console | None = None) -> LLMProvider | None:
    """Create an LLM provider from settings.

    Args:
        provider: Provider name ('openai' or 'gemini')
        settings: Loaded settings holding the API keys
        console: Optional Rich console for output

    Returns:
        LLM provider instance, or None if its API key is not set

    Environment variables:
        OPENAI_API_KEY / OPENAI_MODEL: for the openai provider
        GEMINI_API_KEY / GEMINI_MODEL: for the gemini provider
    """
    con = console or _console
    name = provider.lower()

    if name == "openai":
        if not settings.openai_api_key:
            con.print("[yellow]Warning: OPENAI_API_KEY not set[/yellow]")
            return None
        return create_llm_provider("openai", api_key=settings.openai_api_key, model=settings.openai_model)

    if name == "gemini":
        if not settings.gemini_api_key:
            con.print("[yellow]Warning: GEMINI_API_KEY not set[/yellow]")
            return None
        return create_llm_provider("gemini", api_key=settings.gemini_api_key, model=settings.gemini_model)

    con.print(
        f"[red]Error: Unknown LLM provider: {provider}. "
        f"Choose one of: {', '.join(SUPPORTED_PROVIDERS)}[/red]"
    )
    return None


def get_completion_source(
    settings: Settings,
    direct: str | None = None,
    console: Console | None = None,
) -> tuple[CompletionSource, str]:
    """Create the completion source for the chat client.

    Args:
        settings: Loaded settings
        direct: Provider name to call in-process instead of the backend
        console: Optional Rich console for output

    Returns:
        Tuple of (source, human-readable label)

    Raises:
        SystemExit: If a direct provider was requested but is not configured
    """
    import typer

    con = console or _console
    if direct:
        llm = get_llm(direct, settings, con)
        if llm is None:
            con.print("[red]Error: LLM provider not configured[/red]")
            raise typer.Exit(code=1)
        return ProviderCompletion(llm), f"{direct.lower()} | {llm.model} | direct"

    client = HTTPCompletionClient(
        base_url=settings.backend_url,
        route=settings.route,
        timeout=settings.request_timeout,
    )
    return client, f"{settings.backend_url}/{settings.route}"
