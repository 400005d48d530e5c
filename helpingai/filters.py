"""
HelpingAI SDK - Reasoning Filters

Removes <think>...</think> reasoning blocks and <ser>...</ser> structured
emotional reasoning blocks from model output.

Two variants are provided:
- ThinkFilter / StreamFilter: incremental, for streamed fragments whose
  boundaries may fall anywhere, including inside a tag
- filter_think_ser_blocks: whole-text, for complete responses

The whole-text variant additionally rejoins words hyphen-broken across a
line wrap. Streaming does not, since a fragment boundary cannot tell a
line wrap from a line that is still arriving.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from enum import Enum
from typing import AsyncIterable, AsyncIterator, Dict, Iterable, Iterator, List, Optional

from .types import ChatCompletion, ChatCompletionChunk


logger = logging.getLogger(__name__)


class FilterMode(str, Enum):
    """States of the tag automaton."""
    PLAIN = "plain"
    IN_REASONING = "in_reasoning"    # inside <think>
    IN_STRUCTURED = "in_structured"  # inside <ser>


OPEN_TAGS = {
    "<think>": FilterMode.IN_REASONING,
    "<ser>": FilterMode.IN_STRUCTURED,
}

CLOSE_TAGS = {
    FilterMode.IN_REASONING: "</think>",
    FilterMode.IN_STRUCTURED: "</ser>",
}

MAX_CONSECUTIVE_NEWLINES = 2


class ThinkFilter:
    """
    Incremental filter for one stream of text fragments.

    Feed fragments in arrival order; each call returns the visible text
    that can be released so far. Text that might still turn out to be a
    tag stays buffered until the next fragment decides it.

    Whitespace is normalized as it passes: leading whitespace is dropped,
    runs of blank lines are capped at one, other whitespace runs collapse
    to a single space. Normalized whitespace is held back until the next
    visible character, so trailing whitespace is never emitted.

    Example:
        >>> f = ThinkFilter()
        >>> f.feed("Hello <thi") + f.feed("nk>hidden</thi") + f.feed("nk> world")
        'Hello world'
    """

    def __init__(self):
        self.mode = FilterMode.PLAIN
        self._buffer = ""
        self._pending = ""
        self._consecutive_newlines = 0
        self._last_was_space = False
        self._started = False

    @property
    def in_reasoning(self) -> bool:
        return self.mode is FilterMode.IN_REASONING

    @property
    def in_structured(self) -> bool:
        return self.mode is FilterMode.IN_STRUCTURED

    @property
    def buffered(self) -> str:
        """Text held back because it may be the start of a tag."""
        return self._buffer

    def feed(self, fragment: str) -> str:
        """Consume one fragment and return the text released by it."""
        buffer = self._buffer + fragment
        out: List[str] = []
        pos = 0
        end = len(buffer)

        while pos < end:
            if self.mode is not FilterMode.PLAIN:
                close_tag = CLOSE_TAGS[self.mode]
                if buffer.startswith(close_tag, pos):
                    self.mode = FilterMode.PLAIN
                    pos += len(close_tag)
                    continue
                if _is_partial(close_tag, buffer, pos):
                    break
                pos += 1
                continue

            tag = _match_open_tag(buffer, pos)
            if tag is not None:
                self.mode = OPEN_TAGS[tag]
                pos += len(tag)
                continue
            if any(_is_partial(open_tag, buffer, pos) for open_tag in OPEN_TAGS):
                break

            self._emit(buffer[pos], out)
            pos += 1

        self._buffer = buffer[pos:]
        return "".join(out)

    def finish(self) -> None:
        """
        End the stream.

        Unresolved text (a partial tag or an unclosed block) and trailing
        whitespace are discarded, never released raw.
        """
        if self._buffer or self.mode is not FilterMode.PLAIN:
            logger.debug(
                "Discarding unresolved stream tail (mode=%s, buffered=%d chars)",
                self.mode.value, len(self._buffer)
            )
        self._buffer = ""
        self._pending = ""
        self.mode = FilterMode.PLAIN

    def _emit(self, char: str, out: List[str]) -> None:
        if char.isspace():
            if not self._started:
                return
            if char == "\n":
                self._consecutive_newlines += 1
                if self._consecutive_newlines <= MAX_CONSECUTIVE_NEWLINES:
                    self._pending += "\n"
                self._last_was_space = False
            else:
                if not self._last_was_space:
                    self._pending += " "
                self._last_was_space = True
            return

        if self._pending:
            out.append(self._pending)
        out.append(char)

        self._started = True
        self._pending = ""
        self._consecutive_newlines = 0
        self._last_was_space = False


def _match_open_tag(buffer: str, pos: int) -> Optional[str]:
    for tag in OPEN_TAGS:
        if buffer.startswith(tag, pos):
            return tag
    return None


def _is_partial(tag: str, buffer: str, pos: int) -> bool:
    """True if the rest of the buffer is a proper prefix of tag."""
    remaining = len(buffer) - pos
    return 0 < remaining < len(tag) and tag.startswith(buffer[pos:])


class StreamFilter:
    """
    Applies ThinkFilter to a stream of chunks.

    Each choice index gets its own ThinkFilter, created on first sight,
    since parallel completions (n > 1) interleave within one stream.

    Emission rules per choice:
    - no content: passed through untouched
    - filtered text non-empty: emitted with the filtered text
    - filtered text empty but finish_reason set: emitted with content None
    - otherwise dropped

    A chunk left with no choices is suppressed.
    """

    def __init__(self):
        self._filters: Dict[int, ThinkFilter] = {}

    def filter_for(self, index: int) -> ThinkFilter:
        """Return the filter state for a choice index."""
        if index not in self._filters:
            self._filters[index] = ThinkFilter()
        return self._filters[index]

    def filter_chunk(self, chunk: ChatCompletionChunk) -> Optional[ChatCompletionChunk]:
        """Filter one chunk. Returns None when nothing should be emitted."""
        if not chunk.choices:
            return chunk

        choices = []
        for choice in chunk.choices:
            content = choice.delta.content
            if not content:
                choices.append(choice)
                continue

            text = self.filter_for(choice.index).feed(content)
            if text or choice.finish_reason:
                choices.append(replace(
                    choice,
                    delta=replace(choice.delta, content=text or None)
                ))

        if not choices:
            return None
        return replace(chunk, choices=choices)

    def finish(self) -> None:
        """End the stream for every choice index."""
        for think_filter in self._filters.values():
            think_filter.finish()


def filter_stream(chunks: Iterable[ChatCompletionChunk]) -> Iterator[ChatCompletionChunk]:
    """Filter a chunk iterable, yielding cleaned chunks."""
    stream_filter = StreamFilter()
    try:
        for chunk in chunks:
            filtered = stream_filter.filter_chunk(chunk)
            if filtered is not None:
                yield filtered
    finally:
        stream_filter.finish()


async def afilter_stream(
    chunks: AsyncIterable[ChatCompletionChunk],
) -> AsyncIterator[ChatCompletionChunk]:
    """Async version of filter_stream."""
    stream_filter = StreamFilter()
    try:
        async for chunk in chunks:
            filtered = stream_filter.filter_chunk(chunk)
            if filtered is not None:
                yield filtered
    finally:
        stream_filter.finish()


# ============================================================
# Whole-text filtering
# ============================================================

_THINK_BLOCK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)
_SER_BLOCK_RE = re.compile(r"<ser>.*?</ser>", re.DOTALL)
_HYPHEN_BREAK_RE = re.compile(r"(\w)-\s*\n\s*(\w)")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_EXCESS_SPACES_RE = re.compile(r" {2,}")


def filter_think_ser_blocks(text: Optional[str]) -> Optional[str]:
    """
    Remove reasoning and structured blocks from a complete text.

    Args:
        text: Full response text

    Returns:
        Cleaned text. None and "" are returned unchanged.

    Example:
        >>> filter_think_ser_blocks("<think>plan</think>Hello  world")
        'Hello world'
    """
    if not text:
        return text

    result = _THINK_BLOCK_RE.sub("", text)
    result = _SER_BLOCK_RE.sub("", result)
    result = _HYPHEN_BREAK_RE.sub(r"\1\2", result)
    result = _EXCESS_NEWLINES_RE.sub("\n\n", result)
    result = _EXCESS_SPACES_RE.sub(" ", result)
    return result.strip()


def filter_completion(completion: ChatCompletion) -> ChatCompletion:
    """Return a copy of completion with every message content filtered."""
    choices = []
    for choice in completion.choices:
        if choice.message.content:
            choice = replace(
                choice,
                message=replace(
                    choice.message,
                    content=filter_think_ser_blocks(choice.message.content)
                )
            )
        choices.append(choice)

    return replace(completion, choices=choices)
