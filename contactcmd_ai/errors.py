"""Error taxonomy for the command-suggestion engine.

Provider-level failures (configuration, transport, protocol) abort a chat turn
and reach the caller with whatever transcript had accumulated. Tool failures are
caught per call by the session and fed back to the model as tool turns.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from contactcmd_ai.models.messages import ChatMessage


class AiError(Exception):
    """Base class for every error raised by the engine."""

    def __init__(self, message: str, *, transcript: "Sequence[ChatMessage] | None" = None):
        super().__init__(message)
        self.transcript: tuple[ChatMessage, ...] = tuple(transcript or ())

    def with_transcript(self, transcript: "Sequence[ChatMessage]") -> "AiError":
        """Attach the session transcript accumulated before the failure."""
        self.transcript = tuple(transcript)
        return self


class ConfigError(AiError):
    """Missing credential, model selection or backend library."""


class TransportError(AiError):
    """Network failure, timeout or non-2xx response from the provider."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ProtocolError(AiError):
    """Provider response that does not follow the chat-completions contract."""


class ToolError(AiError):
    """A tool call could not be turned into a command suggestion."""


class UnknownToolError(ToolError):
    """Tool name does not match any catalog entry."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class InvalidArgumentsError(ToolError):
    """Required parameter missing or a parameter has the wrong type."""

    def __init__(self, tool_name: str, detail: str):
        super().__init__(f"Invalid arguments for {tool_name}: {detail}")
        self.tool_name = tool_name
        self.detail = detail


class SessionError(AiError):
    """The orchestration loop could not produce a result."""


class LoopExceededError(SessionError):
    """Provider did not complete within the iteration bound."""

    def __init__(self, max_iterations: int, *, transcript: "Sequence[ChatMessage] | None" = None):
        super().__init__(
            f"Provider did not complete within {max_iterations} iterations",
            transcript=transcript,
        )
        self.max_iterations = max_iterations


class MessageTooLongError(SessionError):
    """User input exceeds the configured token budget."""

    def __init__(self, token_count: int, limit: int):
        super().__init__(f"Message exceeds token limit: {token_count} tokens > {limit} limit")
        self.token_count = token_count
        self.limit = limit
