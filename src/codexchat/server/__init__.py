"""Backend relaying prompts to the vendor APIs."""

from .app import build_providers, create_app

__all__ = ["build_providers", "create_app"]
