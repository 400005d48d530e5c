"""
HelpingAI SDK - Pytest Configuration

Provides:
- SSE payload builders
- Byte streams that deliver a body in arbitrary pieces
- Clients wired to httpx.MockTransport
"""

import json
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx
import pytest

from helpingai import HAI, AsyncHAI


# ============================================================
# SSE Builders
# ============================================================

def chunk_event(
    content: Optional[str] = None,
    index: int = 0,
    finish_reason: Optional[str] = None,
    role: Optional[str] = None,
    **delta_extra: Any
) -> Dict[str, Any]:
    """Build one chat.completion.chunk payload."""
    delta: Dict[str, Any] = dict(delta_extra)
    if content is not None:
        delta["content"] = content
    if role is not None:
        delta["role"] = role
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion.chunk",
        "created": 1700000000,
        "model": "Dhanishtha-2.0-preview",
        "choices": [{"index": index, "delta": delta, "finish_reason": finish_reason}],
    }


def sse_body(events: Iterable[Dict[str, Any]], done: bool = True) -> bytes:
    """Serialize events to an SSE body."""
    lines = [f"data: {json.dumps(event)}\n\n" for event in events]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


def split_every(data: bytes, size: int) -> List[bytes]:
    """Split bytes into pieces of at most size bytes."""
    return [data[i:i + size] for i in range(0, len(data), size)]


class PiecewiseStream(httpx.SyncByteStream, httpx.AsyncByteStream):
    """
    Response body delivered in fixed pieces.

    Records whether it was closed. An exception in pieces is raised
    when reached.
    """

    def __init__(self, pieces: List[Any]):
        self.pieces = pieces
        self.closed = False
        self.delivered = 0

    def __iter__(self):
        for piece in self.pieces:
            if isinstance(piece, Exception):
                raise piece
            self.delivered += 1
            yield piece

    async def __aiter__(self):
        for piece in self.pieces:
            if isinstance(piece, Exception):
                raise piece
            self.delivered += 1
            yield piece

    def close(self):
        self.closed = True

    async def aclose(self):
        self.closed = True


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def captured() -> List[httpx.Request]:
    """Requests seen by the mock transport."""
    return []


@pytest.fixture
def make_client(captured) -> Callable[..., HAI]:
    """Factory for HAI clients backed by a request handler."""
    def factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> HAI:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return handler(request)

        http_client = httpx.Client(transport=httpx.MockTransport(recording_handler))
        kwargs.setdefault("api_key", "test-key")
        return HAI(http_client=http_client, **kwargs)

    return factory


@pytest.fixture
def make_async_client(captured) -> Callable[..., AsyncHAI]:
    """Factory for AsyncHAI clients backed by a request handler."""
    def factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> AsyncHAI:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return handler(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        kwargs.setdefault("api_key", "test-key")
        return AsyncHAI(http_client=http_client, **kwargs)

    return factory


@pytest.fixture
def completion_data() -> Dict[str, Any]:
    """A complete non-streaming response body."""
    return {
        "id": "chatcmpl-123",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "Dhanishtha-2.0-preview",
        "choices": [{
            "index": 0,
            "message": {
                "role": "assistant",
                "content": "<think>The user wants advice.</think>\n\nA good leader listens.",
            },
            "finish_reason": "stop",
        }],
        "usage": {"prompt_tokens": 12, "completion_tokens": 9, "total_tokens": 21},
    }
