"""
HelpingAI SDK - Retry Logic

Opt-in exponential backoff with jitter for non-streaming calls.
Clients are created with max_retries=0, so nothing is retried unless
the caller asks for it.
"""

import asyncio
import logging
import random
import time
from typing import Awaitable, Callable, List, Optional, TypeVar

from .config import DEFAULT_RETRY_STATUS, RetryConfig
from .errors import HAIError, RateLimitError


logger = logging.getLogger(__name__)

T = TypeVar("T")


def calculate_backoff(
    attempt: int,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: bool = True
) -> float:
    """
    Calculate delay for exponential backoff with optional jitter.

    Args:
        attempt: Current retry attempt (0-based)
        initial_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds
        exponential_base: Base for exponential calculation
        jitter: Whether to add random jitter

    Returns:
        Delay in seconds
    """
    delay = min(initial_delay * (exponential_base ** attempt), max_delay)

    # up to 25% either way
    if jitter:
        jitter_range = delay * 0.25
        delay = delay + random.uniform(-jitter_range, jitter_range)

    return max(0, delay)


def should_retry(
    error: Exception,
    retry_on_status: Optional[List[int]] = None
) -> bool:
    """
    Determine if an error should be retried.

    Args:
        error: The exception that was raised
        retry_on_status: HTTP status codes to retry on

    Returns:
        True if the request should be retried
    """
    if retry_on_status is None:
        retry_on_status = list(DEFAULT_RETRY_STATUS)

    if isinstance(error, HAIError):
        if error.retryable:
            return True
        if error.status_code in retry_on_status:
            return True

    return False


class RetryHandler:
    """
    Configurable retry handler for API requests.

    Example:
        handler = RetryHandler(max_retries=2, initial_delay=0.5)
        result = handler.execute(lambda: client._request("GET", "/models"))
    """

    def __init__(
        self,
        max_retries: int = 0,
        initial_delay: float = 1.0,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
        retry_on_status: Optional[List[int]] = None,
        on_retry: Optional[Callable[[int, Exception, float], None]] = None
    ):
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        if retry_on_status is None:
            retry_on_status = list(DEFAULT_RETRY_STATUS)
        self.retry_on_status = retry_on_status
        self.on_retry = on_retry

    @classmethod
    def from_config(
        cls,
        config: RetryConfig,
        on_retry: Optional[Callable[[int, Exception, float], None]] = None
    ) -> "RetryHandler":
        """Create a handler from a RetryConfig."""
        return cls(
            max_retries=config.max_retries,
            initial_delay=config.initial_delay,
            max_delay=config.max_delay,
            exponential_base=config.exponential_base,
            retry_on_status=list(config.retry_on_status),
            on_retry=on_retry,
        )

    def _next_delay(self, attempt: int, error: Exception) -> Optional[float]:
        """Delay before the next attempt, or None to give up."""
        if attempt >= self.max_retries or not should_retry(error, self.retry_on_status):
            return None

        if isinstance(error, RateLimitError) and error.retry_after is not None:
            # Use the server's suggested retry-after
            delay = float(error.retry_after)
        else:
            delay = calculate_backoff(
                attempt,
                self.initial_delay,
                self.max_delay,
                self.exponential_base
            )

        logger.warning(
            "Retrying after %s (attempt %d/%d, sleeping %.2fs)",
            error.__class__.__name__, attempt + 1, self.max_retries, delay
        )
        if self.on_retry:
            self.on_retry(attempt, error, delay)
        return delay

    def execute(self, func: Callable[[], T]) -> T:
        """
        Execute a function with retry logic.

        Args:
            func: A callable that takes no arguments

        Returns:
            The result of the function call
        """
        attempt = 0
        while True:
            try:
                return func()
            except HAIError as e:
                delay = self._next_delay(attempt, e)
                if delay is None:
                    raise
            time.sleep(delay)
            attempt += 1

    async def execute_async(self, func: Callable[[], Awaitable[T]]) -> T:
        """
        Execute an async function with retry logic.

        Args:
            func: An async callable that takes no arguments

        Returns:
            The result of the function call
        """
        attempt = 0
        while True:
            try:
                return await func()
            except HAIError as e:
                delay = self._next_delay(attempt, e)
                if delay is None:
                    raise
            await asyncio.sleep(delay)
            attempt += 1
