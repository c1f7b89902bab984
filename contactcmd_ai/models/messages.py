"""Conversation protocol types shared by providers, executor and session."""

from collections.abc import Sequence
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant", "tool"]


class FunctionCall(BaseModel):
    """Function name and JSON-encoded arguments of a tool call."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    arguments: str = "{}"


class ToolCall(BaseModel):
    """A tool call requested by the model."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str
    call_type: str = Field(default="function", alias="type")
    function: FunctionCall

    @classmethod
    def function_call(cls, call_id: str, name: str, arguments: str = "{}") -> "ToolCall":
        return cls(id=call_id, call_type="function", function=FunctionCall(name=name, arguments=arguments))


class ChatMessage(BaseModel):
    """A single turn in the conversation. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str | None = None
    tool_calls: tuple[ToolCall, ...] | None = None
    tool_call_id: str | None = None

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(role="assistant", content=content)

    @classmethod
    def assistant_with_tool_calls(cls, tool_calls: Sequence[ToolCall]) -> "ChatMessage":
        return cls(role="assistant", tool_calls=tuple(tool_calls))

    @classmethod
    def tool_result(cls, tool_call_id: str, content: str) -> "ChatMessage":
        return cls(role="tool", content=content, tool_call_id=tool_call_id)

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the chat-completions API, omitting absent fields."""
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


class ProviderResponse(BaseModel):
    """Provider-agnostic completion result."""

    model_config = ConfigDict(frozen=True)

    content: str | None = None
    tool_calls: tuple[ToolCall, ...] = ()
    is_complete: bool = False
    finish_reason: str | None = None

    @classmethod
    def text(cls, content: str) -> "ProviderResponse":
        """Final text answer."""
        return cls(content=content, is_complete=True, finish_reason="stop")

    @classmethod
    def with_tool_calls(cls, tool_calls: Sequence[ToolCall]) -> "ProviderResponse":
        """Tool invocation request; never complete."""
        return cls(tool_calls=tuple(tool_calls), is_complete=False, finish_reason="tool_calls")
