"""
HelpingAI SDK - Async Client

Async client for non-blocking API interactions.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import httpx

from .client import (
    build_headers,
    build_retry_handler,
    parse_success_body,
    read_error_body,
)
from .completions import AsyncChat
from .config import ClientConfig, RetryConfig
from .errors import classify_error, translate_transport_errors
from .models import AsyncModels
from .version import __version__


logger = logging.getLogger(__name__)


class AsyncHAI:
    """
    HelpingAI Async Python Client.

    Takes the same arguments as HAI; http_client must be an httpx.AsyncClient.

    Example:
        >>> client = AsyncHAI(api_key="hl-xxx")
        >>> stream = await client.chat.completions.create(
        ...     model="Dhanishtha-2.0-preview",
        ...     messages=[{"role": "user", "content": "Hello!"}],
        ...     stream=True,
        ...     hide_think=True,
        ... )
        >>> async for chunk in stream:
        ...     print(chunk.choices[0].delta.content or "", end="")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        organization: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: int = 0,
        retry_config: Optional[RetryConfig] = None,
        on_retry: Optional[Callable[[int, Exception, float], None]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        config: Optional[ClientConfig] = None,
    ):
        self.config = config or ClientConfig.from_env(
            api_key=api_key,
            organization=organization,
            base_url=base_url,
            timeout=timeout,
        )
        self._retry_handler = build_retry_handler(max_retries, retry_config, on_retry)
        self._owns_client = http_client is None
        self._client: Optional[httpx.AsyncClient] = http_client

        self.chat = AsyncChat(self)
        self.models = AsyncModels(self)

    @property
    def base_url(self) -> str:
        """Base URL for API requests."""
        return self.config.base_url

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or (self._owns_client and self._client.is_closed):
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    # ============================================================
    # Private methods
    # ============================================================

    def _headers(self, auth_required: bool = True) -> Dict[str, str]:
        return build_headers(self.config, f"helpingai-python-async/{__version__}", auth_required)

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        auth_required: bool = True,
    ) -> Any:
        """Make an async HTTP request and handle errors."""
        client = await self._get_client()
        url = f"{self.config.base_url}{path}"
        logger.debug("%s %s", method, url)

        with translate_transport_errors():
            response = await client.request(
                method, url, json=json, headers=self._headers(auth_required)
            )

        if not response.is_success:
            raise classify_error(
                response.status_code,
                dict(response.headers),
                read_error_body(response),
            )
        return parse_success_body(response)

    async def _request_with_retry(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        auth_required: bool = True,
    ) -> Any:
        """Make an async HTTP request with retry logic."""
        async def do_request():
            return await self._request(method, path, json=json, auth_required=auth_required)

        return await self._retry_handler.execute_async(do_request)

    async def _open_stream(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        """Send a streaming request and return the open response."""
        client = await self._get_client()
        url = f"{self.config.base_url}{path}"
        logger.debug("POST %s (stream)", url)
        request = client.build_request("POST", url, json=payload, headers=self._headers())

        with translate_transport_errors():
            response = await client.send(request, stream=True)

        if not response.is_success:
            try:
                with translate_transport_errors():
                    await response.aread()
            finally:
                await response.aclose()
            raise classify_error(
                response.status_code,
                dict(response.headers),
                read_error_body(response),
            )

        return response

    async def close(self):
        """Close the async HTTP client if this client created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.close()
