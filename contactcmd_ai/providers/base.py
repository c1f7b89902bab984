"""Interface every completion backend implements."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from contactcmd_ai.models.messages import ChatMessage, ProviderResponse
from contactcmd_ai.models.tools import ToolDefinition


@runtime_checkable
class AiProvider(Protocol):
    """A backend that can answer chat completions with tool calling."""

    @property
    def name(self) -> str:
        """Provider name for display purposes."""
        ...

    async def complete(self, messages: Sequence[ChatMessage], tools: Sequence[ToolDefinition]) -> ProviderResponse:
        """Generate a completion for the given conversation.

        Args:
            messages: The conversation history, system prompt first
            tools: Tools the model may call

        Returns:
            Either final text or an ordered list of tool calls
        """
        ...

    def is_ready(self) -> bool:
        """Cheap local readiness check; never touches the network."""
        ...
