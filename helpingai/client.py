"""
HelpingAI SDK - Synchronous Client

Main client for synchronous API interactions.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional

import httpx

from .completions import Chat
from .config import ClientConfig, RetryConfig
from .errors import APIError, classify_error, translate_transport_errors
from .models import Models
from .retry import RetryHandler
from .version import __version__


logger = logging.getLogger(__name__)


def build_headers(config: ClientConfig, user_agent: str, auth_required: bool = True) -> Dict[str, str]:
    """Request headers for a config."""
    headers = {
        "Content-Type": "application/json",
        "User-Agent": user_agent,
    }
    if auth_required:
        headers["Authorization"] = f"Bearer {config.api_key}"
    if config.organization:
        headers["HAI-Organization"] = config.organization
    return headers


def build_retry_handler(
    max_retries: int,
    retry_config: Optional[RetryConfig],
    on_retry: Optional[Callable[[int, Exception, float], None]],
) -> RetryHandler:
    config = retry_config or RetryConfig(max_retries=max_retries)
    return RetryHandler.from_config(config, on_retry)


def read_error_body(response: httpx.Response) -> Any:
    """Best-effort JSON body of an error response, None if it does not parse."""
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


def parse_success_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise APIError(
            f"Invalid JSON in API response: {e}",
            status_code=response.status_code,
            headers=dict(response.headers),
        ) from e


class HAI:
    """
    HelpingAI Python Client.

    Args:
        api_key: Your HelpingAI API key. If not provided, reads from HAI_API_KEY env var.
        organization: Optional organization ID.
        base_url: Base URL for the API. Defaults to https://api.helpingai.co/v1
        timeout: Request timeout in seconds. Defaults to 60.
        max_retries: Retry attempts for non-streaming requests. Defaults to 0.
        retry_config: Advanced retry configuration.
        on_retry: Callback called before each retry.
        http_client: Pre-configured httpx.Client to send requests with.
        config: A ready ClientConfig; overrides the individual settings.

    Example:
        >>> client = HAI(api_key="hl-xxx")
        >>> response = client.chat.completions.create(
        ...     model="Helpingai3-raw",
        ...     messages=[{"role": "user", "content": "Hello!"}]
        ... )
        >>> print(response.choices[0].message.content)
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
        http_client: Optional[httpx.Client] = None,
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
        self._client = http_client or httpx.Client(timeout=self.config.timeout)

        self.chat = Chat(self)
        self.models = Models(self)

    @property
    def base_url(self) -> str:
        """Base URL for API requests."""
        return self.config.base_url

    # ============================================================
    # Private methods
    # ============================================================

    def _headers(self, auth_required: bool = True) -> Dict[str, str]:
        return build_headers(self.config, f"helpingai-python/{__version__}", auth_required)

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        auth_required: bool = True,
    ) -> Any:
        """Make an HTTP request and handle errors."""
        url = f"{self.config.base_url}{path}"
        logger.debug("%s %s", method, url)

        with translate_transport_errors():
            response = self._client.request(
                method, url, json=json, headers=self._headers(auth_required)
            )

        return self._handle_response(response)

    def _request_with_retry(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        auth_required: bool = True,
    ) -> Any:
        """Make an HTTP request with retry logic."""
        def do_request():
            return self._request(method, path, json=json, auth_required=auth_required)

        return self._retry_handler.execute(do_request)

    def _handle_response(self, response: httpx.Response) -> Any:
        """Return the JSON body of a success response, raise the classified error otherwise."""
        if not response.is_success:
            raise classify_error(
                response.status_code,
                dict(response.headers),
                read_error_body(response),
            )
        return parse_success_body(response)

    def _open_stream(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        """
        Send a streaming request and return the open response.

        Error responses are read, closed and raised as classified errors
        before any streaming begins.
        """
        url = f"{self.config.base_url}{path}"
        logger.debug("POST %s (stream)", url)
        request = self._client.build_request(
            "POST", url, json=payload, headers=self._headers()
        )

        with translate_transport_errors():
            response = self._client.send(request, stream=True)

        if not response.is_success:
            try:
                with translate_transport_errors():
                    response.read()
            finally:
                response.close()
            raise classify_error(
                response.status_code,
                dict(response.headers),
                read_error_body(response),
            )

        return response

    # ============================================================
    # Context Manager
    # ============================================================

    def close(self):
        """Close the HTTP client if this client created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
