"""
HelpingAI SDK - Error Classes

Error taxonomy for API interactions and the classifier that maps
HTTP error responses onto it.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Mapping, Optional

import httpx


logger = logging.getLogger(__name__)


class HAIError(Exception):
    """
    Base exception for the HelpingAI SDK.

    All SDK errors inherit from this class.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code if applicable
        headers: Response headers (lower-cased keys) if applicable
        body: Raw response body if applicable
    """

    retryable = False

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
    ):
        self.message = message
        self.status_code = status_code
        self.headers = headers or {}
        self.body = body
        super().__init__(message)

    def __str__(self) -> str:
        if self.status_code:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"status_code={self.status_code})"
        )


# ============================================================
# Authentication
# ============================================================

class AuthenticationError(HAIError):
    """API key authentication failed."""


class NoAPIKeyError(AuthenticationError):
    """No API key was provided."""

    def __init__(self, **kwargs):
        super().__init__(
            "No API key provided. Set your API key using `HAI(api_key=...)` "
            "or by setting the HAI_API_KEY environment variable. You can generate "
            "API keys in the HelpingAI dashboard at https://helpingai.co/dashboard",
            **kwargs
        )


class InvalidAPIKeyError(AuthenticationError):
    """The API key is invalid."""

    def __init__(self, **kwargs):
        super().__init__(
            "Invalid API key. Check your API key at https://helpingai.co/dashboard",
            **kwargs
        )


class PermissionDeniedError(AuthenticationError):
    """The API key lacks permission for the requested operation."""

    def __init__(self, message: str = "Permission denied", **kwargs):
        super().__init__(message, **kwargs)


# ============================================================
# Invalid requests
# ============================================================

class InvalidRequestError(HAIError):
    """
    Request parameters are invalid.

    Attributes:
        param: The parameter that caused the error
        code: Error code reported by the API
    """

    def __init__(
        self,
        message: str,
        param: Optional[str] = None,
        code: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.param = param
        self.code = code

    def __str__(self) -> str:
        msg = super().__str__()
        if self.param:
            msg = f"{msg} (Parameter: {self.param})"
        if self.code:
            msg = f"{msg} (Error Code: {self.code})"
        return msg


class InvalidModelError(InvalidRequestError):
    """
    The requested model does not exist.

    Attributes:
        model: Model identifier extracted from the API message
    """

    def __init__(self, model: str, **kwargs):
        super().__init__(
            f"Model '{model}' not found. Available models can be found at "
            "https://api.helpingai.co/v1/models",
            param="model",
            **kwargs
        )
        self.model = model


class ContentFilterError(InvalidRequestError):
    """Content was flagged by moderation filters."""

    def __init__(self, message: str = "Content violates content policy", **kwargs):
        super().__init__(message, code="content_filter", **kwargs)


class TokenLimitError(InvalidRequestError):
    """The token limit was exceeded."""

    def __init__(self, message: str = "Token limit exceeded", **kwargs):
        super().__init__(message, code="token_limit_exceeded", **kwargs)


class InvalidContentError(InvalidRequestError):
    """The provided content is invalid."""

    def __init__(self, message: str = "Invalid content provided", **kwargs):
        super().__init__(message, code="invalid_content", **kwargs)


# ============================================================
# Rate limiting and availability
# ============================================================

class RateLimitError(HAIError):
    """
    Rate limit exceeded.

    Check the retry_after attribute for when to retry.

    Attributes:
        retry_after: Seconds to wait before retrying, None if the
            server did not say
    """

    retryable = True

    def __init__(self, message: str = "Rate limit exceeded", **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = parse_retry_after(self.headers)

    def __str__(self) -> str:
        msg = super().__str__()
        if self.retry_after:
            msg = f"{msg} (Retry after: {self.retry_after} seconds)"
        return msg


class TooManyRequestsError(RateLimitError):
    """Too many requests were made within a time window."""

    def __init__(self, **kwargs):
        super().__init__("Too many requests", **kwargs)


class ServiceUnavailableError(HAIError):
    """The API service is temporarily unavailable."""

    retryable = True

    def __init__(self, **kwargs):
        super().__init__("Service temporarily unavailable", **kwargs)


class TimeoutError(HAIError):
    """Request timed out."""

    retryable = True

    def __init__(self, message: str = "Request timed out", **kwargs):
        super().__init__(message, **kwargs)


class APIConnectionError(HAIError):
    """
    Failed to connect to the API.

    Attributes:
        should_retry: Whether the failure is worth retrying
    """

    def __init__(self, message: str, should_retry: bool = False, **kwargs):
        super().__init__(message, **kwargs)
        self.should_retry = should_retry

    @property
    def retryable(self) -> bool:
        return self.should_retry


class StreamDecodeError(HAIError):
    """
    A server-sent event carried a payload that is not valid JSON.

    The stream it came from is terminated; other streams are unaffected.

    Attributes:
        payload: The raw text that failed to decode
    """

    def __init__(self, message: str, payload: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.payload = payload


class ModelNotFoundError(HAIError):
    """A model lookup found no matching model."""


# ============================================================
# Generic API errors
# ============================================================

class APIError(HAIError):
    """
    Generic API error.

    Attributes:
        code: Raw error code from the API
        type: Raw error type from the API
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        type: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.code = code
        self.type = type

    def __str__(self) -> str:
        msg = super().__str__()
        if self.code:
            msg = f"{msg} (Code: {self.code})"
        if self.type:
            msg = f"{msg} (Type: {self.type})"
        return msg


class ServerError(APIError):
    """The API server encountered an error."""

    retryable = True

    def __init__(self, message: str = "Internal server error", **kwargs):
        super().__init__(message, code="server_error", **kwargs)


# ============================================================
# Classification
# ============================================================

_QUOTED_RE = re.compile(r"'([^']*)'")


@dataclass(frozen=True)
class ErrorEnvelope:
    """Normalized error body returned by the API."""
    message: str
    type: Optional[str] = None
    code: Optional[str] = None
    param: Optional[str] = None


def parse_error_envelope(body: Any) -> ErrorEnvelope:
    """
    Normalize an error body into an ErrorEnvelope.

    Accepts ``{"error": {...}}``, ``{"error": "..."}`` or a flat
    ``{"message": ..., "type": ..., "code": ...}``. Anything else
    degrades to a generic message, and fields of the wrong type are
    dropped so the classifier can rely on strings.
    """
    if not isinstance(body, dict):
        return ErrorEnvelope(message="Unknown error occurred")

    error = body.get("error")
    if isinstance(error, dict):
        source = error
    elif isinstance(error, str) and error:
        return ErrorEnvelope(message=error)
    else:
        source = body

    message = source.get("message")
    return ErrorEnvelope(
        message=message if isinstance(message, str) and message else "Unknown error",
        type=_str_or_none(source.get("type")),
        code=_str_or_none(source.get("code")),
        param=_str_or_none(source.get("param")),
    )


def _str_or_none(value: Any) -> Optional[str]:
    # numeric codes are common; anything structured is dropped
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def parse_retry_after(headers: Optional[Mapping[str, str]]) -> Optional[int]:
    """Read the retry-after header as whole seconds, None if absent or unparsable."""
    if not headers:
        return None
    for key, value in headers.items():
        if key.lower() == "retry-after":
            try:
                return int(str(value).strip())
            except ValueError:
                return None
    return None


def extract_model_name(message: str) -> str:
    """Pull the first single-quoted substring out of an API message."""
    match = _QUOTED_RE.search(message)
    return match.group(1) if match else "unknown"


def classify_error(
    status_code: int,
    headers: Optional[Mapping[str, str]] = None,
    body: Any = None,
) -> HAIError:
    """
    Select the error class for a non-success HTTP response.

    Args:
        status_code: HTTP status code
        headers: Response headers
        body: Parsed JSON body, or None when it did not parse

    Returns:
        The error to raise. Never raises itself.
    """
    envelope = parse_error_envelope(body)
    headers = {k.lower(): v for k, v in (headers or {}).items()}
    context = {"status_code": status_code, "headers": headers, "body": body}

    if status_code == 401:
        error: HAIError = InvalidAPIKeyError(**context)
    elif status_code == 400:
        if "model" in envelope.message.lower():
            error = InvalidModelError(extract_model_name(envelope.message), **context)
        else:
            error = InvalidRequestError(
                envelope.message,
                param=envelope.param,
                code=envelope.code,
                **context
            )
    elif status_code == 429:
        error = TooManyRequestsError(**context)
    elif status_code == 503:
        error = ServiceUnavailableError(**context)
    elif status_code >= 500:
        error = ServerError(envelope.message, **context)
    elif envelope.type and "content_filter" in envelope.type.lower():
        error = ContentFilterError(envelope.message, **context)
    else:
        error = APIError(envelope.message, code=envelope.code, type=envelope.type, **context)

    logger.debug("Classified HTTP %s as %s", status_code, error.__class__.__name__)
    return error


@contextmanager
def translate_transport_errors(action: str = "communicating with") -> Iterator[None]:
    """
    Map httpx transport failures onto the SDK taxonomy.

    Timeouts become TimeoutError, refused connections and DNS failures
    become a retryable APIConnectionError, anything else on the wire a
    non-retryable one.
    """
    try:
        yield
    except httpx.TimeoutException as e:
        raise TimeoutError("Request timed out") from e
    except httpx.ConnectError as e:
        raise APIConnectionError(
            f"Error connecting to HAI API: {e}", should_retry=True
        ) from e
    except httpx.TransportError as e:
        raise APIConnectionError(f"Error {action} HAI API: {e}") from e


def is_retryable_error(error: Any) -> bool:
    """
    Check if an error is retryable.

    Infrastructure errors (rate limits, timeouts, unavailable service,
    server errors, retryable connection failures) are retryable. Semantic
    errors (invalid request, authentication) are not.
    """
    if isinstance(error, HAIError):
        return bool(error.retryable)

    return False
