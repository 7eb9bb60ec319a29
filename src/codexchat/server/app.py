"""Backend HTTP surface.

Relays prompts to the configured vendor APIs:

    GET  /        health check
    POST /gemini  {prompt} -> {bot}
    POST /openai  {prompt} -> {response}

Provider failures answer 500 with an {error} body.
"""

import logging
from collections.abc import Mapping
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import Settings
from ..llm import LLMProvider, create_llm_provider
from .schemas import ErrorReply, GeminiReply, HealthReply, OpenAIReply, PromptRequest

logger = logging.getLogger(__name__)

HEALTH_MESSAGE = "Hello from Codex!"
GEMINI_ERROR = "Failed to generate response."


def build_providers(settings: Settings) -> dict[str, LLMProvider | None]:
    """Create a provider per route; routes without an API key get None."""
    providers: dict[str, LLMProvider | None] = {"openai": None, "gemini": None}
    if settings.openai_api_key:
        providers["openai"] = create_llm_provider(
            "openai", api_key=settings.openai_api_key, model=settings.openai_model
        )
    if settings.gemini_api_key:
        providers["gemini"] = create_llm_provider(
            "gemini", api_key=settings.gemini_api_key, model=settings.gemini_model
        )
    return providers


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content=ErrorReply(error=message).model_dump())


def _provider(request: Request, route: str) -> LLMProvider | None:
    provider = request.app.state.providers.get(route)
    if provider is None:
        logger.error("No %s provider configured; set its API key", route)
    return provider


def create_app(
    settings: Settings | None = None,
    providers: Mapping[str, LLMProvider | None] | None = None,
) -> FastAPI:
    """Build the backend application.

    Args:
        settings: Runtime settings (default: read from the environment)
        providers: Route name -> provider. Built from settings when omitted.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        for provider in app.state.providers.values():
            if provider is not None:
                await provider.close()

    app = FastAPI(title="codexchat", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.providers = dict(providers) if providers is not None else build_providers(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_model=HealthReply)
    async def health() -> HealthReply:
        return HealthReply(message=HEALTH_MESSAGE)

    @app.post("/gemini", response_model=GeminiReply, responses={500: {"model": ErrorReply}})
    async def gemini(body: PromptRequest, request: Request):
        provider = _provider(request, "gemini")
        if provider is None:
            return _error(GEMINI_ERROR)
        try:
            text = await provider.complete(body.prompt)
        except Exception:
            logger.exception("Error calling Gemini API")
            return _error(GEMINI_ERROR)
        return GeminiReply(bot=text)

    @app.post("/openai", response_model=OpenAIReply, responses={500: {"model": ErrorReply}})
    async def openai(body: PromptRequest, request: Request):
        provider = _provider(request, "openai")
        if provider is None:
            return _error("OpenAI provider is not configured")
        try:
            text = await provider.complete(
                body.prompt,
                temperature=0.0,
                max_tokens=settings.openai_max_tokens,
                top_p=1,
                frequency_penalty=0.5,
                presence_penalty=0,
            )
        except Exception as e:
            logger.exception("Error calling OpenAI API")
            return _error(str(e) or type(e).__name__)
        return OpenAIReply(response=text)

    return app
