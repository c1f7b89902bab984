"""Shared fixtures."""

from collections.abc import Sequence

import pytest

from contactcmd_ai.models.messages import ChatMessage, ProviderResponse
from contactcmd_ai.models.tools import ToolDefinition


class ScriptedProvider:
    """Provider that replays a fixed sequence of responses."""

    name = "Scripted"

    def __init__(
        self, responses: Sequence[ProviderResponse | BaseException] = (), repeat: ProviderResponse | None = None
    ):
        self.responses = list(responses)
        self.repeat = repeat
        self.calls: list[tuple[list[ChatMessage], list[ToolDefinition]]] = []

    def is_ready(self) -> bool:
        return True

    async def complete(self, messages: Sequence[ChatMessage], tools: Sequence[ToolDefinition]) -> ProviderResponse:
        self.calls.append((list(messages), list(tools)))
        if self.responses:
            response = self.responses.pop(0)
        elif self.repeat is not None:
            response = self.repeat
        else:
            raise AssertionError("ScriptedProvider ran out of responses")

        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def scripted_provider():
    """Factory for scripted providers."""
    return ScriptedProvider
