"""Main CLI application using Typer."""
import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from ..chat import ChatSession
from ..config import ROUTE_RESPONSE_FIELDS, Settings, load_settings
from ..conversation import Message
from ..log import configure_logging
from ..reveal import RevealOutcome
from .providers import get_completion_source

# Create Typer app
app = typer.Typer(
    name="codexchat",
    help="Chat with OpenAI or Gemini through a small relay backend",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


def _settings(env_file: Path | None, **overrides: object) -> Settings:
    """Load settings and apply command-line overrides that were given.

    Invalid values (from the environment or the options) exit with code 1.
    """
    try:
        settings = load_settings(env_file)
        updates = {key: value for key, value in overrides.items() if value is not None}
        if updates:
            settings = Settings(**{**settings.model_dump(), **updates})
    except ValueError as e:
        console.print(f"[red]Error: Invalid settings: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    configure_logging(settings.log_level, console=Console(stderr=True))
    return settings


def _check_route(route: str | None) -> None:
    if route is not None and route not in ROUTE_RESPONSE_FIELDS:
        console.print(f"[red]Error: Unknown route: {route}. Choose one of: {', '.join(ROUTE_RESPONSE_FIELDS)}[/red]")
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default: HOST or 127.0.0.1)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default: PORT or 5000)"),
    env_file: Path | None = typer.Option(None, "--env-file", help="Dotenv file to load"),
):
    """Run the relay backend (GET /, POST /gemini, POST /openai)."""
    import uvicorn

    from ..server import create_app

    settings = _settings(env_file, host=host, port=port)
    server_app = create_app(settings)
    configured = [route for route, provider in server_app.state.providers.items() if provider is not None]
    if not configured:
        console.print("[yellow]Warning: no API keys set; every route will answer 500[/yellow]")

    console.print(f"[bold red]Server running on port: http://{settings.host}:{settings.port}/[/bold red]")
    console.print(f"[dim]Routes with a provider: {', '.join(configured) or 'none'}[/dim]")
    uvicorn.run(server_app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


@app.command()
def chat(
    route: str | None = typer.Option(None, "--route", "-r", help="Backend route: gemini or openai"),
    backend_url: str | None = typer.Option(None, "--backend-url", "-b", help="Backend base URL"),
    direct: str | None = typer.Option(
        None,
        "--direct",
        "-d",
        help="Call this provider (openai or gemini) in-process instead of the backend"
    ),
    env_file: Path | None = typer.Option(None, "--env-file", help="Dotenv file to load"),
):
    """Open the interactive chat UI."""
    from ..ui import run_chat_tui

    _check_route(route)
    settings = _settings(env_file, route=route, backend_url=backend_url)
    completion, label = get_completion_source(settings, direct=direct, console=console)
    asyncio.run(run_chat_tui(completion, settings=settings, source_label=label))


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Prompt to send"),
    route: str | None = typer.Option(None, "--route", "-r", help="Backend route: gemini or openai"),
    backend_url: str | None = typer.Option(None, "--backend-url", "-b", help="Backend base URL"),
    direct: str | None = typer.Option(
        None,
        "--direct",
        "-d",
        help="Call this provider (openai or gemini) in-process instead of the backend"
    ),
    env_file: Path | None = typer.Option(None, "--env-file", help="Dotenv file to load"),
):
    """Send one prompt and print the reply as it is revealed."""
    _check_route(route)
    settings = _settings(env_file, route=route, backend_url=backend_url)
    completion, label = get_completion_source(settings, direct=direct, console=console)

    async def _ask() -> RevealOutcome:
        session = ChatSession(
            completion,
            chunk_size=settings.chunk_size,
            word_delay_ms=settings.word_delay_ms,
            loader_interval_ms=settings.loader_interval_ms,
            request_timeout=settings.request_timeout,
        )
        text = Text()

        with Live(Panel(text, title=label, border_style="cyan"), console=console, refresh_per_second=20) as live:
            def _render(message: Message) -> None:
                if message.is_user:
                    return
                text.plain = message.content
                live.refresh()

            session.store.add_listener(_render)
            try:
                reply = await session.submit(prompt)
                return await session.wait_for_reveal(reply.id)
            finally:
                await session.close()

    try:
        outcome = asyncio.run(_ask())
    except KeyboardInterrupt:
        console.print("[dim]Interrupted.[/dim]")
        raise typer.Exit(code=130)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    if outcome is RevealOutcome.STOPPED:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
