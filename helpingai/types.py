"""
HelpingAI SDK - Response Types

OpenAI-compatible response models. Mapping from wire dictionaries is
lenient: missing or malformed fields fall back to defaults instead of
raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


# ============================================================
# Function and Tool Calls
# ============================================================

@dataclass
class FunctionCall:
    """Legacy function call in a message or delta."""
    name: Optional[str] = None
    arguments: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> FunctionCall:
        data = _as_dict(data)
        return cls(name=data.get("name"), arguments=data.get("arguments"))


@dataclass
class ToolFunction:
    """Function details in a tool call."""
    name: Optional[str] = None
    arguments: Optional[str] = None


@dataclass
class ToolCall:
    """Tool call in OpenAI format."""
    id: str
    function: ToolFunction
    type: str = "function"
    index: Optional[int] = None  # set on streaming deltas

    @classmethod
    def from_dict(cls, data: Any) -> ToolCall:
        data = _as_dict(data)
        func = _as_dict(data.get("function"))
        return cls(
            id=data.get("id") or "",
            type=data.get("type") or "function",
            index=data.get("index"),
            function=ToolFunction(
                name=func.get("name"),
                arguments=func.get("arguments")
            )
        )


def _tool_calls(data: Dict[str, Any]) -> Optional[List[ToolCall]]:
    if not data.get("tool_calls"):
        return None
    return [ToolCall.from_dict(tc) for tc in _as_list(data["tool_calls"])]


def _function_call(data: Dict[str, Any]) -> Optional[FunctionCall]:
    if not data.get("function_call"):
        return None
    return FunctionCall.from_dict(data["function_call"])


# ============================================================
# Non-streaming Response Models
# ============================================================

@dataclass
class ChatCompletionMessage:
    """Message in a chat completion response."""
    role: str = ""
    content: Optional[str] = None
    function_call: Optional[FunctionCall] = None
    tool_calls: Optional[List[ToolCall]] = None


@dataclass
class Choice:
    """A choice in the completion response."""
    index: int
    message: ChatCompletionMessage
    finish_reason: Optional[str] = None
    logprobs: Optional[Any] = None


@dataclass
class CompletionUsage:
    """Usage statistics for a completion."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> CompletionUsage:
        data = _as_dict(data)
        return cls(
            prompt_tokens=data.get("prompt_tokens") or 0,
            completion_tokens=data.get("completion_tokens") or 0,
            total_tokens=data.get("total_tokens") or 0
        )


@dataclass
class ChatCompletion:
    """
    OpenAI-compatible chat completion response.
    """
    id: str
    created: int
    model: str
    choices: List[Choice]
    object: str = "chat.completion"
    system_fingerprint: Optional[str] = None
    usage: Optional[CompletionUsage] = None

    @classmethod
    def from_api_response(cls, data: Any) -> ChatCompletion:
        """Create from a complete API response."""
        data = _as_dict(data)
        choices = []
        for choice_data in _as_list(data.get("choices")):
            choice_data = _as_dict(choice_data)
            msg_data = _as_dict(choice_data.get("message"))

            message = ChatCompletionMessage(
                role=msg_data.get("role") or "",
                content=msg_data.get("content"),
                function_call=_function_call(msg_data),
                tool_calls=_tool_calls(msg_data)
            )

            choices.append(Choice(
                index=choice_data.get("index") or 0,
                message=message,
                finish_reason=choice_data.get("finish_reason"),
                logprobs=choice_data.get("logprobs")
            ))

        usage = None
        if data.get("usage"):
            usage = CompletionUsage.from_dict(data["usage"])

        return cls(
            id=data.get("id") or "",
            created=data.get("created") or 0,
            model=data.get("model") or "",
            choices=choices,
            system_fingerprint=data.get("system_fingerprint"),
            usage=usage
        )


# ============================================================
# Streaming Response Models
# ============================================================

@dataclass
class ChoiceDelta:
    """Delta content in a streaming chunk."""
    content: Optional[str] = None
    role: Optional[str] = None
    function_call: Optional[FunctionCall] = None
    tool_calls: Optional[List[ToolCall]] = None


@dataclass
class StreamChoice:
    """A choice in a streaming response chunk."""
    index: int
    delta: ChoiceDelta
    finish_reason: Optional[str] = None
    logprobs: Optional[Any] = None


@dataclass
class ChatCompletionChunk:
    """
    OpenAI-compatible streaming chunk.

    One chunk is produced per SSE event, in arrival order.
    """
    id: str
    created: int
    model: str
    choices: List[StreamChoice]
    object: str = "chat.completion.chunk"
    system_fingerprint: Optional[str] = None

    @classmethod
    def from_sse_data(cls, data: Any) -> ChatCompletionChunk:
        """Create from one decoded SSE payload."""
        data = _as_dict(data)
        choices = []
        for choice_data in _as_list(data.get("choices")):
            choice_data = _as_dict(choice_data)
            delta_data = _as_dict(choice_data.get("delta"))

            delta = ChoiceDelta(
                content=delta_data.get("content"),
                role=delta_data.get("role"),
                function_call=_function_call(delta_data),
                tool_calls=_tool_calls(delta_data)
            )

            choices.append(StreamChoice(
                index=choice_data.get("index") or 0,
                delta=delta,
                finish_reason=choice_data.get("finish_reason"),
                logprobs=choice_data.get("logprobs")
            ))

        return cls(
            id=data.get("id") or "",
            created=data.get("created") or 0,
            model=data.get("model") or "",
            choices=choices,
            system_fingerprint=data.get("system_fingerprint")
        )


# ============================================================
# Models
# ============================================================

@dataclass
class Model:
    """Model information."""
    id: str
    name: str
    description: Optional[str] = None
    version: Optional[str] = None
    object: str = "model"

    @classmethod
    def from_id(cls, model_id: str) -> Model:
        """Create a bare model entry from an id returned by the API."""
        return cls(id=model_id, name=model_id)


@dataclass
class Message:
    """A chat message for building requests."""
    role: str
    content: Optional[str] = None
    name: Optional[str] = None
    tool_call_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def system(cls, content: str) -> Message:
        """Create a system message."""
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        """Create a user message."""
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: Optional[str] = None) -> Message:
        """Create an assistant message."""
        return cls(role="assistant", content=content)

    @classmethod
    def tool(cls, tool_call_id: str, content: str) -> Message:
        """Create a tool result message."""
        return cls(role="tool", content=content, tool_call_id=tool_call_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        result: Dict[str, Any] = {"role": self.role}

        if self.content is not None:
            result["content"] = self.content
        if self.name:
            result["name"] = self.name
        if self.tool_call_id:
            result["tool_call_id"] = self.tool_call_id
        result.update(self.extra)

        return result
