"""API client for Flavortown."""

from __future__ import annotations

from collections.abc import Callable

import httpx

from flvr_cli.models.config_models import APIConfig
from flvr_cli.utils.logger import get_logger

from .errors import APIConnectionError, APIStatusError, Section


def normalize_authorization(api_key: str) -> str | None:
    """Build the Authorization header value for *api_key*.

    Keys already carrying a ``Bearer`` scheme (any case) pass through as-is.
    Returns None for an empty key.
    """
    key = api_key.strip()
    if not key:
        return None
    if key.lower().startswith("bearer "):
        return key
    return f"Bearer {key}"


class FlavortownClient:
    """HTTP client for the Flavortown API.

    The API key is read through *api_key_provider* on every request, so a
    credential change is picked up by the next request without rebuilding
    the client.
    """

    def __init__(
        self,
        config: APIConfig,
        api_key_provider: Callable[[], str],
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.base_url = config.endpoint.rstrip("/")
        self.timeout = config.timeout
        self._api_key_provider = api_key_provider
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_headers(self) -> dict[str, str]:
        """Get HTTP headers with authentication."""
        headers = {
            self.config.client_header: self.config.client_header_value,
            "Accept": "application/json",
            # Always hit the network, never an intermediate cache
            "Cache-Control": "no-cache",
        }

        authorization = normalize_authorization(self._api_key_provider())
        if authorization:
            headers["Authorization"] = authorization

        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get(self, path: str, *, section: Section) -> httpx.Response:
        """Make a GET request and return the response if it is a 200.

        Raises:
            APIStatusError: The server answered with any other status.
            APIConnectionError: The request failed at the transport level.
        """
        logger = get_logger()
        client = await self._get_client()
        url = path if path.startswith("/") else f"/{path}"

        try:
            response = await client.get(url, headers=self._get_headers())
        except httpx.RequestError as e:
            detail = str(e) or type(e).__name__
            logger.warning("GET %s failed: %s", url, detail)
            raise APIConnectionError(section, detail) from e

        logger.debug("GET %s -> %s", url, response.status_code)
        if response.status_code != 200:
            raise APIStatusError(section, response.status_code, response.text)
        return response
