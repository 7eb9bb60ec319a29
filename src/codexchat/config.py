"""Configuration for codexchat.

Hides where settings come from (environment, dotenv file) and their defaults.
Timing constants for the reveal animation live here as well.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Reveal animation
WORD_DELAY_MS = 40  # Milliseconds between chunks
CHUNK_SIZE = 2  # Words emitted per chunk
LOADER_INTERVAL_MS = 300  # Milliseconds between loader frames
LOADER_FRAMES = ("", ".", "..", "...")

# Fallback replies shown when the provider fails
FALLBACK_REPLY = "Sorry, I couldn't process your request at the moment."
TIMEOUT_REPLY = "The request timed out. Please try again."

# Backend routes and the response field each one answers with
ROUTE_RESPONSE_FIELDS = {
    "gemini": "bot",
    "openai": "response",
}

DEFAULT_ENV_FILE = Path("config") / "config.env"

Route = Literal["gemini", "openai"]


class Settings(BaseModel):
    """Runtime settings for the backend and the chat client."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(default="127.0.0.1", description="Backend bind address")
    port: int = Field(default=5000, ge=1, le=65535, description="Backend port")
    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o", description="OpenAI chat model")
    openai_max_tokens: int = Field(default=100, ge=1, description="Max tokens per OpenAI reply")
    gemini_api_key: str | None = Field(default=None, description="Gemini API key")
    gemini_model: str = Field(default="gemini-2.0-flash", description="Gemini model")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    backend_url: str = Field(default="http://localhost:5000", description="Backend base URL for the client")
    route: Route = Field(default="gemini", description="Backend route the client posts to")
    request_timeout: float | None = Field(default=30.0, description="Seconds before a request is abandoned")
    chunk_size: int = Field(default=CHUNK_SIZE, ge=1)
    word_delay_ms: int = Field(default=WORD_DELAY_MS, ge=1)
    loader_interval_ms: int = Field(default=LOADER_INTERVAL_MS, ge=1)
    log_level: str = Field(default="INFO")

    @field_validator("request_timeout")
    @classmethod
    def _zero_disables_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            env: Mapping to read from (default: os.environ)

        Returns:
            Settings with every unset variable left at its default
        """
        env = os.environ if env is None else env

        # Environment variable -> field name
        names = {
            "HOST": "host",
            "PORT": "port",
            "OPENAI_API_KEY": "openai_api_key",
            "OPENAI_MODEL": "openai_model",
            "OPENAI_MAX_TOKENS": "openai_max_tokens",
            "GEMINI_MODEL": "gemini_model",
            "CODEXCHAT_BACKEND_URL": "backend_url",
            "CODEXCHAT_ROUTE": "route",
            "CODEXCHAT_REQUEST_TIMEOUT": "request_timeout",
            "CODEXCHAT_CHUNK_SIZE": "chunk_size",
            "CODEXCHAT_WORD_DELAY_MS": "word_delay_ms",
            "CODEXCHAT_LOADER_INTERVAL_MS": "loader_interval_ms",
            "LOG_LEVEL": "log_level",
        }
        values: dict[str, object] = {
            field: env[var] for var, field in names.items() if env.get(var)
        }

        # Older deployments used the misspelled GEMNI_API_KEY
        gemini_key = env.get("GEMINI_API_KEY") or env.get("GEMNI_API_KEY")
        if gemini_key:
            values["gemini_api_key"] = gemini_key

        if env.get("CORS_ORIGINS"):
            values["cors_origins"] = [
                origin.strip() for origin in env["CORS_ORIGINS"].split(",") if origin.strip()
            ]

        return cls(**values)


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Load a dotenv file into the environment and build settings.

    Args:
        env_file: Explicit dotenv path. Defaults to config/config.env when it
            exists, otherwise python-dotenv's own .env lookup.
    """
    if env_file is not None:
        load_dotenv(env_file)
    elif DEFAULT_ENV_FILE.exists():
        load_dotenv(DEFAULT_ENV_FILE)
    else:
        load_dotenv()
    return Settings.from_env()
