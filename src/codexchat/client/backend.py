"""HTTP client for the codexchat backend.

Posts `{"prompt": ...}` to a backend route and reads the reply field that
route answers with (`bot` for /gemini, `response` for /openai).
"""

import logging

import httpx

from ..config import ROUTE_RESPONSE_FIELDS
from ..errors import ProviderError, RequestTimedOut
from .base import CompletionSource

logger = logging.getLogger(__name__)


class HTTPCompletionClient(CompletionSource):
    """Completion source backed by the codexchat HTTP backend."""

    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        route: str = "gemini",
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Backend base URL
            route: Backend route name ('gemini' or 'openai')
            timeout: Transport timeout in seconds (None waits forever)
            client: Preconfigured httpx client; base_url is ignored when given
        """
        if route not in ROUTE_RESPONSE_FIELDS:
            raise ValueError(
                f"Unknown route: {route}. Supported routes: {', '.join(ROUTE_RESPONSE_FIELDS)}"
            )
        self._route = route
        self._field = ROUTE_RESPONSE_FIELDS[route]
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    @property
    def route(self) -> str:
        return self._route

    async def complete(self, prompt: str) -> str:
        try:
            response = await self._client.post(f"/{self._route}", json={"prompt": prompt})
        except httpx.TimeoutException as e:
            raise RequestTimedOut(self._timeout) from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Request to /{self._route} failed: {e}") from e

        if response.is_error:
            logger.warning("Backend answered %d on /%s", response.status_code, self._route)
            raise ProviderError(
                f"Backend returned {response.status_code}: {_error_detail(response)}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError(f"Backend returned a non-JSON body on /{self._route}") from e

        text = payload.get(self._field) if isinstance(payload, dict) else None
        if not isinstance(text, str):
            raise ProviderError(f"Backend reply has no '{self._field}' text field")
        return text

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _error_detail(response: httpx.Response) -> str:
    """Best-effort error message from an error response body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(payload, dict) and "error" in payload:
        return str(payload["error"])
    return str(payload)[:200]
