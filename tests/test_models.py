"""Tests for protocol and result models."""

import json

import pytest
from pydantic import ValidationError

from contactcmd_ai.models.chat import AiChatResult, CommandFeedback, FeedbackAction
from contactcmd_ai.models.messages import ChatMessage, FunctionCall, ProviderResponse, ToolCall
from contactcmd_ai.models.tools import ToolResult


class TestChatMessage:
    """Tests for conversation message construction and wire format."""

    def test_role_helpers(self):
        """Test that each helper sets the expected role and fields."""
        assert ChatMessage.system("rules").role == "system"
        assert ChatMessage.user("hi").content == "hi"
        assert ChatMessage.assistant("done").role == "assistant"

        tool_turn = ChatMessage.tool_result("call_1", "{}")
        assert tool_turn.role == "tool"
        assert tool_turn.tool_call_id == "call_1"

    def test_assistant_with_tool_calls_has_no_content(self):
        """Test that tool-call turns carry calls and no text."""
        call = ToolCall.function_call("call_1", "suggest_list")
        message = ChatMessage.assistant_with_tool_calls([call])

        assert message.content is None
        assert message.tool_calls == (call,)

    def test_wire_format_omits_absent_fields(self):
        """Test that optional fields are left out instead of sent as null."""
        assert ChatMessage.user("hello").to_wire() == {"role": "user", "content": "hello"}

    def test_wire_format_tool_calls(self):
        """Test the chat-completions shape of an assistant tool-call turn."""
        call = ToolCall.function_call("call_1", "suggest_show", '{"name": "ann"}')
        wire = ChatMessage.assistant_with_tool_calls([call]).to_wire()

        assert wire == {
            "role": "assistant",
            "tool_calls": [
                {"id": "call_1", "type": "function", "function": {"name": "suggest_show", "arguments": '{"name": "ann"}'}}
            ],
        }

    def test_wire_format_tool_result(self):
        """Test the chat-completions shape of a tool turn."""
        wire = ChatMessage.tool_result("call_9", "ok").to_wire()
        assert wire == {"role": "tool", "content": "ok", "tool_call_id": "call_9"}

    def test_messages_are_immutable(self):
        """Test that appended turns cannot be modified."""
        message = ChatMessage.user("hello")
        with pytest.raises(ValidationError):
            message.content = "changed"  # type: ignore[misc]

    def test_invalid_role(self):
        """Test that unknown roles are rejected."""
        with pytest.raises(ValidationError):
            ChatMessage(role="developer", content="x")  # type: ignore[arg-type]


class TestToolCall:
    """Tests for tool call parsing."""

    def test_tool_call_from_wire(self):
        """Test parsing a tool call as returned by an OpenAI-compatible API."""
        call = ToolCall.model_validate(
            {
                "id": "call_abc",
                "type": "function",
                "function": {"name": "suggest_search", "arguments": '{"location": "texas"}'},
                "index": 0,
            }
        )
        assert call.id == "call_abc"
        assert call.call_type == "function"
        assert call.function == FunctionCall(name="suggest_search", arguments='{"location": "texas"}')


class TestProviderResponse:
    """Tests for provider response helpers."""

    def test_text_is_complete(self):
        response = ProviderResponse.text("All set")
        assert response.is_complete
        assert response.finish_reason == "stop"
        assert response.tool_calls == ()

    def test_tool_calls_are_not_complete(self):
        response = ProviderResponse.with_tool_calls([ToolCall.function_call("call_1", "suggest_list")])
        assert not response.is_complete
        assert response.finish_reason == "tool_calls"
        assert response.content is None


class TestToolResult:
    """Tests for the tool result payload."""

    def test_only_command_and_explanation(self):
        """Test that a tool result cannot carry anything besides its two strings."""
        assert set(ToolResult.model_fields) == {"command", "explanation"}
        with pytest.raises(ValidationError):
            ToolResult(command="/list", explanation="List", phone="555-0100")  # type: ignore[call-arg]

    def test_to_content(self):
        result = ToolResult(command="/list", explanation="List all contacts")
        assert json.loads(result.to_content()) == {"command": "/list", "explanation": "List all contacts"}


class TestChatResult:
    """Tests for chat outcome and feedback models."""

    def test_last_command(self):
        result = AiChatResult(text="", commands=("/list", "/browse"))
        assert result.command == "/browse"
        assert AiChatResult(text="hi").command is None

    def test_accept_feedback(self):
        feedback = CommandFeedback(command="/list", action=FeedbackAction.ACCEPT)
        assert feedback.final_command() == "/list"

    def test_reject_feedback(self):
        feedback = CommandFeedback(command="/list", action=FeedbackAction.REJECT)
        assert feedback.final_command() is None

    def test_edit_feedback(self):
        feedback = CommandFeedback(
            command="/search --name jon", action=FeedbackAction.EDIT, edited_command=" /search --name john "
        )
        assert feedback.final_command() == "/search --name john"

    def test_edit_feedback_requires_text(self):
        with pytest.raises(ValidationError):
            CommandFeedback(command="/list", action=FeedbackAction.EDIT)
