"""
HelpingAI SDK - Configuration

Immutable client configuration. Each client owns one ClientConfig;
nothing here is process-wide.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import NoAPIKeyError


DEFAULT_BASE_URL = "https://api.helpingai.co/v1"
DEFAULT_TIMEOUT = 60.0  # seconds
DEFAULT_RETRY_STATUS = (429, 500, 502, 503, 504)


@dataclass(frozen=True)
class ClientConfig:
    """
    Resolved connection settings for one client.

    Attributes:
        api_key: HelpingAI API key
        base_url: API root, without trailing slash
        organization: Optional organization sent as HAI-Organization
        timeout: Per-request timeout in seconds
    """
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    organization: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if not self.api_key:
            raise NoAPIKeyError()
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(
        cls,
        api_key: Optional[str] = None,
        organization: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ClientConfig:
        """
        Build a config from explicit values, falling back to the environment.

        Environment variables:
            HAI_API_KEY, HAI_ORGANIZATION, HAI_BASE_URL, HAI_TIMEOUT

        Raises:
            NoAPIKeyError: If no API key is found
            ValueError: If HAI_TIMEOUT is not a number
        """
        if timeout is None:
            env_timeout = os.getenv("HAI_TIMEOUT")
            timeout = float(env_timeout) if env_timeout else DEFAULT_TIMEOUT

        return cls(
            api_key=api_key or os.getenv("HAI_API_KEY") or "",
            organization=organization or os.getenv("HAI_ORGANIZATION"),
            base_url=base_url or os.getenv("HAI_BASE_URL") or DEFAULT_BASE_URL,
            timeout=timeout,
        )


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_retries: int = 0
    initial_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    exponential_base: float = 2.0
    retry_on_status: List[int] = field(default_factory=lambda: list(DEFAULT_RETRY_STATUS))
