"""
HelpingAI SDK - SSE Decoding and Stream Tests
"""

import json

import httpx
import pytest

from conftest import PiecewiseStream, chunk_event, split_every, sse_body
from helpingai.errors import APIConnectionError, StreamDecodeError, TimeoutError
from helpingai.streaming import AsyncStream, SSEDecoder, Stream, iter_sse_events
from helpingai.types import ChatCompletionChunk


def open_response(pieces):
    """A streaming response over pieces, as the client would hand it to Stream."""
    stream = PiecewiseStream(pieces)
    response = httpx.Response(
        200,
        stream=stream,
        request=httpx.Request("POST", "https://api.helpingai.co/v1/chat/completions"),
    )
    return response, stream


def contents(chunks):
    return "".join(c.choices[0].delta.content or "" for c in chunks if c.choices)


class TestSSEDecoder:
    """Line framing and event decoding."""

    def test_line_split_across_reads(self):
        decoder = SSEDecoder()
        assert decoder.feed(b'data: {"a"') == []
        assert decoder.feed(b': 1}\n') == ['data: {"a": 1}']
        assert decoder.decode('data: {"a": 1}') == {"a": 1}

    def test_multibyte_character_split_across_reads(self):
        body = 'data: {"content": "café \U0001F60A"}\n'.encode("utf-8")
        events = list(iter_sse_events(split_every(body, 1)))
        assert events == [{"content": "café \U0001F60A"}]

    def test_crlf_line_endings(self):
        body = b'data: {"n": 1}\r\n\r\ndata: {"n": 2}\r\n\r\n'
        assert list(iter_sse_events([body])) == [{"n": 1}, {"n": 2}]

    def test_done_stops_decoding(self):
        body = b'data: {"n": 1}\n\ndata: [DONE]\n\ndata: {"n": 2}\n\n'
        assert list(iter_sse_events([body])) == [{"n": 1}]

    def test_done_sets_flag(self):
        decoder = SSEDecoder()
        decoder.decode("data: [DONE]")
        assert decoder.done
        assert decoder.feed(b"data: {}\n") == []

    def test_non_data_lines_ignored(self):
        body = b': keep-alive\nevent: message\nid: 7\nretry: 100\ndata: {"n": 1}\n\n'
        assert list(iter_sse_events([body])) == [{"n": 1}]

    def test_unterminated_tail_decoded_at_end(self):
        assert list(iter_sse_events([b'data: {"n": 1}\n', b'data: {"n": 2}'])) == [
            {"n": 1}, {"n": 2}
        ]

    def test_malformed_payload_raises(self):
        with pytest.raises(StreamDecodeError) as exc_info:
            list(iter_sse_events([b"data: {not json}\n\n"]))
        assert exc_info.value.payload == "{not json}"

    def test_events_yielded_lazily(self):
        """Events before a malformed one are delivered first."""
        events = iter_sse_events([b'data: {"n": 1}\n\n', b"data: oops\n\n"])
        assert next(events) == {"n": 1}
        with pytest.raises(StreamDecodeError):
            next(events)

    def test_str_input(self):
        decoder = SSEDecoder()
        assert decoder.feed('data: {"x": true}\n') == ['data: {"x": true}']


class TestStream:
    """Stream over an open response."""

    def test_yields_chunks_in_order(self):
        body = sse_body([
            chunk_event(role="assistant"),
            chunk_event("Hello"),
            chunk_event(" world"),
            chunk_event(finish_reason="stop"),
        ])
        response, raw = open_response(split_every(body, 7))

        chunks = list(Stream(response))

        assert all(isinstance(c, ChatCompletionChunk) for c in chunks)
        assert len(chunks) == 4
        assert chunks[0].choices[0].delta.role == "assistant"
        assert contents(chunks) == "Hello world"
        assert chunks[-1].choices[0].finish_reason == "stop"
        assert raw.closed

    def test_hide_think(self):
        body = sse_body([
            chunk_event("<thi"),
            chunk_event("nk>weighing options</thi"),
            chunk_event("nk>\n\nBe kind."),
            chunk_event(finish_reason="stop"),
        ])
        response, _ = open_response([body])

        chunks = list(Stream(response, hide_think=True))

        assert contents(chunks) == "Be kind."
        assert chunks[-1].choices[0].finish_reason == "stop"

    def test_raw_content_without_hide_think(self):
        body = sse_body([chunk_event("<think>x</think>"), chunk_event("Hi")])
        response, _ = open_response([body])

        assert contents(Stream(response)) == "<think>x</think>Hi"

    def test_eof_without_done(self):
        body = sse_body([chunk_event("a"), chunk_event("b")], done=False)
        response, raw = open_response([body])

        assert contents(Stream(response)) == "ab"
        assert raw.closed

    def test_malformed_event_terminates_and_closes(self):
        body = sse_body([chunk_event("ok")], done=False) + b"data: {broken\n\n"
        response, raw = open_response([body])
        stream = Stream(response)

        assert next(stream).choices[0].delta.content == "ok"
        with pytest.raises(StreamDecodeError):
            next(stream)
        assert raw.closed

    def test_close_releases_response(self):
        body = sse_body([chunk_event("a"), chunk_event("b"), chunk_event("c")])
        response, raw = open_response(split_every(body, 20))
        stream = Stream(response)

        next(stream)
        stream.close()

        assert raw.closed
        with pytest.raises(StopIteration):
            next(stream)

    def test_context_manager(self):
        body = sse_body([chunk_event("a"), chunk_event("b")])
        response, raw = open_response([body])

        with Stream(response) as stream:
            first = next(stream)

        assert first.choices[0].delta.content == "a"
        assert raw.closed

    def test_read_timeout_mid_stream(self):
        response, raw = open_response([
            sse_body([chunk_event("partial")], done=False),
            httpx.ReadTimeout("read timed out"),
        ])
        stream = Stream(response)

        assert next(stream).choices[0].delta.content == "partial"
        with pytest.raises(TimeoutError):
            next(stream)
        assert raw.closed

    def test_connection_drop_mid_stream(self):
        response, raw = open_response([httpx.RemoteProtocolError("peer closed connection")])

        with pytest.raises(APIConnectionError) as exc_info:
            list(Stream(response))
        assert not exc_info.value.should_retry
        assert raw.closed

    def test_empty_choices_chunk_passes_through(self):
        usage_event = {"id": "x", "created": 1, "model": "m", "choices": []}
        body = sse_body([chunk_event("Hi"), usage_event])
        response, _ = open_response([body])

        chunks = list(Stream(response, hide_think=True))

        assert len(chunks) == 2
        assert chunks[1].choices == []

    def test_lenient_chunk_fields(self):
        body = ("data: " + json.dumps({"choices": [{"delta": {"content": "x"}}]}) + "\n\n").encode()
        response, _ = open_response([body])

        chunk = next(Stream(response))

        assert chunk.id == ""
        assert chunk.choices[0].index == 0
        assert chunk.choices[0].delta.content == "x"


class TestAsyncStream:
    """AsyncStream over an open response."""

    @pytest.mark.asyncio
    async def test_yields_filtered_chunks(self):
        body = sse_body([
            chunk_event("Hello <ser>Emotion: warm</ser>"),
            chunk_event("friend"),
            chunk_event(finish_reason="stop"),
        ])
        response, raw = open_response(split_every(body, 5))

        chunks = [chunk async for chunk in AsyncStream(response, hide_think=True)]

        assert contents(chunks) == "Hello friend"
        assert raw.closed

    @pytest.mark.asyncio
    async def test_aclose(self):
        body = sse_body([chunk_event("a"), chunk_event("b")])
        response, raw = open_response([body])

        async with AsyncStream(response) as stream:
            first = await stream.__anext__()

        assert first.choices[0].delta.content == "a"
        assert raw.closed
