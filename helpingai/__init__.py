"""
HelpingAI Python SDK

Client for the HelpingAI API - AI with emotional intelligence.

Quick Start:
    from helpingai import HAI

    client = HAI(api_key="hl-xxx")

    response = client.chat.completions.create(
        model="Dhanishtha-2.0-preview",
        messages=[{"role": "user", "content": "What makes a good leader?"}],
        hide_think=True,
    )
    print(response.choices[0].message.content)

    # Streaming
    stream = client.chat.completions.create(
        model="Dhanishtha-2.0-preview",
        messages=[{"role": "user", "content": "Tell me a story"}],
        stream=True,
        hide_think=True,
    )
    for chunk in stream:
        print(chunk.choices[0].delta.content or "", end="", flush=True)

    # Async usage
    async_client = AsyncHAI(api_key="hl-xxx")
    response = await async_client.chat.completions.create(...)
"""

from .version import __version__
from .client import HAI
from .async_client import AsyncHAI
from .config import ClientConfig, RetryConfig
from .types import (
    ChatCompletion,
    ChatCompletionChunk,
    ChatCompletionMessage,
    Choice,
    ChoiceDelta,
    CompletionUsage,
    FunctionCall,
    Message,
    Model,
    StreamChoice,
    ToolCall,
    ToolFunction,
)
from .errors import (
    HAIError,
    AuthenticationError,
    NoAPIKeyError,
    InvalidAPIKeyError,
    PermissionDeniedError,
    InvalidRequestError,
    InvalidModelError,
    ContentFilterError,
    TokenLimitError,
    InvalidContentError,
    RateLimitError,
    TooManyRequestsError,
    ServiceUnavailableError,
    TimeoutError,
    APIConnectionError,
    StreamDecodeError,
    ModelNotFoundError,
    APIError,
    ServerError,
    ErrorEnvelope,
    classify_error,
    is_retryable_error,
)
from .filters import StreamFilter, ThinkFilter, filter_think_ser_blocks
from .streaming import AsyncStream, SSEDecoder, Stream

__all__ = [
    # Clients
    "HAI",
    "AsyncHAI",
    "ClientConfig",
    "RetryConfig",
    # Types
    "ChatCompletion",
    "ChatCompletionChunk",
    "ChatCompletionMessage",
    "Choice",
    "ChoiceDelta",
    "CompletionUsage",
    "FunctionCall",
    "Message",
    "Model",
    "StreamChoice",
    "ToolCall",
    "ToolFunction",
    # Errors
    "HAIError",
    "AuthenticationError",
    "NoAPIKeyError",
    "InvalidAPIKeyError",
    "PermissionDeniedError",
    "InvalidRequestError",
    "InvalidModelError",
    "ContentFilterError",
    "TokenLimitError",
    "InvalidContentError",
    "RateLimitError",
    "TooManyRequestsError",
    "ServiceUnavailableError",
    "TimeoutError",
    "APIConnectionError",
    "StreamDecodeError",
    "ModelNotFoundError",
    "APIError",
    "ServerError",
    "ErrorEnvelope",
    "classify_error",
    "is_retryable_error",
    # Streaming and filtering
    "Stream",
    "AsyncStream",
    "SSEDecoder",
    "StreamFilter",
    "ThinkFilter",
    "filter_think_ser_blocks",
]
