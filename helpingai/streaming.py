"""
HelpingAI SDK - Streaming

Server-sent event decoding for streamed chat completions.

The wire format is one ``data: <json>`` line per event, terminated by
``data: [DONE]``. Reads from the transport carry no line alignment, so
partial lines are buffered until their newline arrives.

Example:
    stream = client.chat.completions.create(
        model="Dhanishtha-2.0-preview",
        messages=[{"role": "user", "content": "Tell me a story"}],
        stream=True,
        hide_think=True,
    )

    with stream:
        for chunk in stream:
            print(chunk.choices[0].delta.content or "", end="")
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Iterable, Iterator, List, Union

import httpx

from .errors import StreamDecodeError, translate_transport_errors
from .filters import afilter_stream, filter_stream
from .types import ChatCompletionChunk


logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_LINE = "data: [DONE]"

_NO_EVENT = object()


class SSEDecoder:
    """
    Incremental SSE line framer.

    feed() returns the complete lines contained in the input so far;
    decode() turns one line into an event payload. Bytes are decoded
    incrementally so a multibyte character split across reads survives.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""
        self.done = False

    def feed(self, data: Union[bytes, str]) -> List[str]:
        """Add one read to the buffer and return the lines it completed."""
        if self.done:
            return []
        text = self._decoder.decode(data) if isinstance(data, bytes) else data
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        return lines

    def flush(self) -> List[str]:
        """Return the unterminated last line, if any, at end of input."""
        if self.done:
            return []
        tail = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        return [tail] if tail else []

    def decode(self, line: str) -> Any:
        """
        Decode one line.

        Returns the parsed JSON payload of a ``data:`` line, or the
        _NO_EVENT sentinel for lines that carry no event. The terminal
        ``data: [DONE]`` line sets ``done``.

        Raises:
            StreamDecodeError: If the payload is not valid JSON
        """
        line = line.rstrip("\r")
        stripped = line.strip()
        if not stripped:
            return _NO_EVENT
        if stripped == DONE_LINE:
            self.done = True
            return _NO_EVENT
        if not line.startswith(DATA_PREFIX):
            return _NO_EVENT

        payload = line[len(DATA_PREFIX):]
        try:
            return json.loads(payload)
        except json.JSONDecodeError as e:
            raise StreamDecodeError(f"Error parsing stream: {e}", payload=payload) from e


def _decode_lines(decoder: SSEDecoder, lines: List[str]) -> Iterator[Any]:
    for line in lines:
        event = decoder.decode(line)
        if decoder.done:
            return
        if event is not _NO_EVENT:
            yield event


def iter_sse_events(chunks: Iterable[Union[bytes, str]]) -> Iterator[Any]:
    """
    Lazily decode SSE events from an iterable of reads.

    Stops at ``data: [DONE]`` or when the input ends.
    """
    decoder = SSEDecoder()
    for chunk in chunks:
        yield from _decode_lines(decoder, decoder.feed(chunk))
        if decoder.done:
            return
    yield from _decode_lines(decoder, decoder.flush())


async def aiter_sse_events(chunks: AsyncIterable[Union[bytes, str]]) -> AsyncIterator[Any]:
    """Async version of iter_sse_events."""
    decoder = SSEDecoder()
    async for chunk in chunks:
        for event in _decode_lines(decoder, decoder.feed(chunk)):
            yield event
        if decoder.done:
            return
    for event in _decode_lines(decoder, decoder.flush()):
        yield event


class Stream:
    """
    Single-pass iterator of ChatCompletionChunk over an open response.

    The response is closed when iteration finishes, fails, or is
    abandoned through close() or the context manager.

    Args:
        response: A streaming httpx response that already passed status checks.
        hide_think: Remove <think> and <ser> blocks from delta content.
    """

    def __init__(self, response: httpx.Response, hide_think: bool = False):
        self.response = response
        self.hide_think = hide_think
        self._iterator = self._iter_chunks()

    def __iter__(self) -> Iterator[ChatCompletionChunk]:
        return self

    def __next__(self) -> ChatCompletionChunk:
        return next(self._iterator)

    def _iter_events(self) -> Iterator[Any]:
        logger.debug("Stream opened: %s", self.response.url)
        try:
            with translate_transport_errors("reading stream from"):
                yield from iter_sse_events(self.response.iter_bytes())
        finally:
            self.response.close()
            logger.debug("Stream closed: %s", self.response.url)

    def _normalize(self, events: Iterable[Any]) -> Iterator[ChatCompletionChunk]:
        for event in events:
            yield ChatCompletionChunk.from_sse_data(event)

    def _iter_chunks(self) -> Iterator[ChatCompletionChunk]:
        events = self._iter_events()
        try:
            chunks = self._normalize(events)
            if self.hide_think:
                chunks = filter_stream(chunks)
            yield from chunks
        finally:
            events.close()

    def close(self) -> None:
        """Stop iteration and release the connection."""
        self._iterator.close()
        self.response.close()

    def __enter__(self) -> Stream:
        return self

    def __exit__(self, *args) -> None:
        self.close()


class AsyncStream:
    """
    Async single-pass iterator of ChatCompletionChunk over an open response.

    Args:
        response: A streaming httpx response that already passed status checks.
        hide_think: Remove <think> and <ser> blocks from delta content.
    """

    def __init__(self, response: httpx.Response, hide_think: bool = False):
        self.response = response
        self.hide_think = hide_think
        self._iterator = self._iter_chunks()

    def __aiter__(self) -> AsyncIterator[ChatCompletionChunk]:
        return self

    async def __anext__(self) -> ChatCompletionChunk:
        return await self._iterator.__anext__()

    async def _iter_events(self) -> AsyncIterator[Any]:
        logger.debug("Stream opened: %s", self.response.url)
        try:
            with translate_transport_errors("reading stream from"):
                async for event in aiter_sse_events(self.response.aiter_bytes()):
                    yield event
        finally:
            await self.response.aclose()
            logger.debug("Stream closed: %s", self.response.url)

    async def _normalize(self, events: AsyncIterable[Any]) -> AsyncIterator[ChatCompletionChunk]:
        async for event in events:
            yield ChatCompletionChunk.from_sse_data(event)

    async def _iter_chunks(self) -> AsyncIterator[ChatCompletionChunk]:
        events = self._iter_events()
        try:
            chunks = self._normalize(events)
            if self.hide_think:
                chunks = afilter_stream(chunks)
            async for chunk in chunks:
                yield chunk
        finally:
            await events.aclose()

    async def aclose(self) -> None:
        """Stop iteration and release the connection."""
        await self._iterator.aclose()
        await self.response.aclose()

    async def __aenter__(self) -> AsyncStream:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
