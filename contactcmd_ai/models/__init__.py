"""Protocol and result types."""

from contactcmd_ai.models.chat import AiChatResult, CommandFeedback, FeedbackAction
from contactcmd_ai.models.messages import ChatMessage, FunctionCall, ProviderResponse, ToolCall
from contactcmd_ai.models.tools import ToolDefinition, ToolParameter, ToolResult

__all__ = [
    "AiChatResult",
    "ChatMessage",
    "CommandFeedback",
    "FeedbackAction",
    "FunctionCall",
    "ProviderResponse",
    "ToolCall",
    "ToolDefinition",
    "ToolParameter",
    "ToolResult",
]
