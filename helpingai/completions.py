"""
HelpingAI SDK - Chat Completions

OpenAI-compatible ``client.chat.completions.create(...)`` interface.

Example:
    from helpingai import HAI

    client = HAI(api_key="hl-xxx")

    response = client.chat.completions.create(
        model="Dhanishtha-2.0-preview",
        messages=[
            {"role": "system", "content": "You are an expert in emotional intelligence."},
            {"role": "user", "content": "What makes a good leader?"}
        ],
        hide_think=True
    )

    print(response.choices[0].message.content)
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Literal,
    Optional,
    Sequence,
    Union,
    overload,
)

from .filters import filter_completion
from .streaming import AsyncStream, Stream
from .types import ChatCompletion, Message

if TYPE_CHECKING:
    from .async_client import AsyncHAI
    from .client import HAI


CHAT_COMPLETIONS_PATH = "/chat/completions"

MessageInput = Union[Message, Dict[str, Any]]


def normalize_messages(messages: Sequence[MessageInput]) -> List[Dict[str, Any]]:
    """Normalize Message objects and dicts to a list of dicts."""
    return [m.to_dict() if isinstance(m, Message) else dict(m) for m in messages]


def build_chat_payload(
    model: str,
    messages: Sequence[MessageInput],
    stream: bool = False,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    top_p: Optional[float] = None,
    frequency_penalty: Optional[float] = None,
    presence_penalty: Optional[float] = None,
    stop: Optional[Union[str, List[str]]] = None,
    n: Optional[int] = None,
    logprobs: Optional[bool] = None,
    top_logprobs: Optional[int] = None,
    response_format: Optional[Dict[str, Any]] = None,
    seed: Optional[int] = None,
    user: Optional[str] = None,
    tools: Optional[List[Dict[str, Any]]] = None,
    tool_choice: Optional[Union[str, Dict[str, Any]]] = "auto",
) -> Dict[str, Any]:
    """
    Build the JSON body of a chat completion request.

    Options left as None are omitted. tool_choice is only sent
    together with tools.
    """
    payload: Dict[str, Any] = {
        "model": model,
        "messages": normalize_messages(messages),
        "stream": stream,
    }

    optional = {
        "temperature": temperature,
        "max_tokens": max_tokens,
        "top_p": top_p,
        "frequency_penalty": frequency_penalty,
        "presence_penalty": presence_penalty,
        "stop": stop,
        "n": n,
        "logprobs": logprobs,
        "top_logprobs": top_logprobs,
        "response_format": response_format,
        "seed": seed,
        "user": user,
        "tools": tools,
    }
    payload.update({key: value for key, value in optional.items() if value is not None})

    if tools and tool_choice is not None:
        payload["tool_choice"] = tool_choice

    return payload


class ChatCompletions:
    """
    Chat completions interface.

    Usage:
        client.chat.completions.create(
            model="Helpingai3-raw",
            messages=[{"role": "user", "content": "Hello"}]
        )
    """

    def __init__(self, client: HAI):
        self._client = client

    @overload
    def create(
        self,
        *,
        model: str,
        messages: Sequence[MessageInput],
        stream: Literal[False] = False,
        hide_think: bool = False,
        **kwargs
    ) -> ChatCompletion: ...

    @overload
    def create(
        self,
        *,
        model: str,
        messages: Sequence[MessageInput],
        stream: Literal[True],
        hide_think: bool = False,
        **kwargs
    ) -> Stream: ...

    def create(
        self,
        *,
        model: str,
        messages: Sequence[MessageInput],
        stream: bool = False,
        hide_think: bool = False,
        **kwargs
    ) -> Union[ChatCompletion, Stream]:
        """
        Create a chat completion.

        Args:
            model: Model ID to use
            messages: List of messages in the conversation
            stream: Whether to stream the response
            hide_think: Remove <think> and <ser> blocks from the output
            **kwargs: Optional request parameters (temperature, max_tokens,
                top_p, frequency_penalty, presence_penalty, stop, n,
                logprobs, top_logprobs, response_format, seed, user,
                tools, tool_choice)

        Returns:
            ChatCompletion, or a Stream of ChatCompletionChunk if streaming

        Raises:
            HAIError: The classified API or transport error
        """
        payload = build_chat_payload(model, messages, stream=stream, **kwargs)

        if stream:
            response = self._client._open_stream(CHAT_COMPLETIONS_PATH, payload)
            return Stream(response, hide_think=hide_think)

        data = self._client._request_with_retry("POST", CHAT_COMPLETIONS_PATH, json=payload)
        completion = ChatCompletion.from_api_response(data)
        return filter_completion(completion) if hide_think else completion


class AsyncChatCompletions:
    """Async version of ChatCompletions."""

    def __init__(self, client: AsyncHAI):
        self._client = client

    @overload
    async def create(
        self,
        *,
        model: str,
        messages: Sequence[MessageInput],
        stream: Literal[False] = False,
        hide_think: bool = False,
        **kwargs
    ) -> ChatCompletion: ...

    @overload
    async def create(
        self,
        *,
        model: str,
        messages: Sequence[MessageInput],
        stream: Literal[True],
        hide_think: bool = False,
        **kwargs
    ) -> AsyncStream: ...

    async def create(
        self,
        *,
        model: str,
        messages: Sequence[MessageInput],
        stream: bool = False,
        hide_think: bool = False,
        **kwargs
    ) -> Union[ChatCompletion, AsyncStream]:
        """Create a chat completion asynchronously."""
        payload = build_chat_payload(model, messages, stream=stream, **kwargs)

        if stream:
            response = await self._client._open_stream(CHAT_COMPLETIONS_PATH, payload)
            return AsyncStream(response, hide_think=hide_think)

        data = await self._client._request_with_retry(
            "POST", CHAT_COMPLETIONS_PATH, json=payload
        )
        completion = ChatCompletion.from_api_response(data)
        return filter_completion(completion) if hide_think else completion


class Chat:
    """Chat namespace."""

    def __init__(self, client: HAI):
        self.completions = ChatCompletions(client)


class AsyncChat:
    """Async chat namespace."""

    def __init__(self, client: AsyncHAI):
        self.completions = AsyncChatCompletions(client)
