"""Chat session driving the tool-calling loop.

The session has no access to user data. The model receives the user's text,
the prior turns of this session and the tool catalog; tool calls resolve to
command strings through the executor, and the CLI runs accepted commands only
after chat() has returned. Command output never flows back into the session.
"""

import json
from collections.abc import Sequence

from cuid2 import cuid_wrapper

from contactcmd_ai.config import DEFAULT_MAX_ITERATIONS
from contactcmd_ai.errors import AiError, LoopExceededError, ProtocolError, ToolError
from contactcmd_ai.models.chat import AiChatResult
from contactcmd_ai.models.messages import ChatMessage, ToolCall
from contactcmd_ai.models.tools import ToolDefinition
from contactcmd_ai.prompts import SYSTEM_PROMPT
from contactcmd_ai.providers.base import AiProvider
from contactcmd_ai.tools.catalog import get_all_tools
from contactcmd_ai.tools.executor import ToolExecutor, get_tool_executor
from contactcmd_ai.utils.logging import get_logger
from contactcmd_ai.utils.tokens import TokenCounter

logger = get_logger(__name__)

cuid = cuid_wrapper()


class AiChatSession:
    """One conversation with a provider, bounded by max_iterations per chat() call."""

    def __init__(
        self,
        provider: AiProvider,
        *,
        executor: ToolExecutor | None = None,
        tools: Sequence[ToolDefinition] | None = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        system_prompt: str | None = SYSTEM_PROMPT,
        token_counter: TokenCounter | None = None,
        session_id: str | None = None,
    ):
        """Initialize chat session.

        Args:
            provider: Completion backend
            executor: Tool executor (defaults to the shared instance)
            tools: Tool catalog offered to the model (defaults to the full catalog)
            max_iterations: Provider rounds allowed per chat() call
            system_prompt: Prompt sent ahead of the history; not part of the transcript
            token_counter: Optional budget check for user input
            session_id: Identifier used in logs (generated if omitted)
        """
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")

        self.provider = provider
        self.executor = executor or get_tool_executor()
        self.tools: tuple[ToolDefinition, ...] = tuple(tools) if tools is not None else get_all_tools()
        self.max_iterations = max_iterations
        self.system_prompt = system_prompt
        self.token_counter = token_counter
        self.session_id = session_id or cuid()
        self._messages: list[ChatMessage] = []

    @property
    def history(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def message_count(self) -> int:
        return len(self._messages)

    @property
    def provider_name(self) -> str:
        return self.provider.name

    def is_ready(self) -> bool:
        return self.provider.is_ready()

    def clear_history(self) -> None:
        """Forget every turn of this session."""
        self._messages.clear()

    async def chat(self, user_text: str) -> AiChatResult:
        """Turn one user request into command suggestions.

        Args:
            user_text: What the user typed; the only input the model gets from outside the session

        Returns:
            Final assistant text, the suggested commands in emission order and the transcript

        Raises:
            MessageTooLongError: If the input exceeds the token budget (nothing is appended)
            LoopExceededError: If the provider does not complete within max_iterations rounds
            ConfigError, TransportError, ProtocolError: Provider failures, with the transcript attached
        """
        if self.token_counter:
            self.token_counter.validate(user_text)

        self._messages.append(ChatMessage.user(user_text))
        commands: list[str] = []

        logger.info(
            f"Session {self.session_id}: starting chat with {self.provider_name}, "
            f"{len(self.tools)} tools, max_iterations: {self.max_iterations}"
        )

        try:
            for iteration in range(1, self.max_iterations + 1):
                logger.debug(f"Session {self.session_id}: iteration {iteration}/{self.max_iterations}")

                response = await self.provider.complete(self._provider_messages(), self.tools)

                if not response.tool_calls:
                    text = response.content or ""
                    if response.is_complete:
                        self._messages.append(ChatMessage.assistant(text))
                        logger.info(
                            f"Session {self.session_id}: completed in {iteration} iterations "
                            f"with {len(commands)} suggestions"
                        )
                        return AiChatResult(
                            text=text,
                            commands=tuple(commands),
                            transcript=self.history,
                            iterations=iteration,
                            session_id=self.session_id,
                        )

                    logger.warning(
                        f"Session {self.session_id}: incomplete response without tool calls "
                        f"(finish reason: {response.finish_reason})"
                    )
                    if text:
                        self._messages.append(ChatMessage.assistant(text))
                    continue

                self._check_unique_ids(response.tool_calls)
                self._messages.append(ChatMessage.assistant_with_tool_calls(response.tool_calls))
                logger.info(f"Session {self.session_id}: provider requested {len(response.tool_calls)} tools")

                for tool_call in response.tool_calls:
                    self._messages.append(self._run_tool(tool_call, commands))

        except AiError as e:
            logger.error(f"Session {self.session_id}: chat aborted: {e}")
            e.with_transcript(self._messages)
            raise

        logger.warning(f"Session {self.session_id}: reached max iterations ({self.max_iterations})")
        raise LoopExceededError(self.max_iterations, transcript=self._messages)

    def _provider_messages(self) -> list[ChatMessage]:
        if self.system_prompt:
            return [ChatMessage.system(self.system_prompt), *self._messages]
        return list(self._messages)

    def _check_unique_ids(self, tool_calls: Sequence[ToolCall]) -> None:
        seen: set[str] = set()
        for tool_call in tool_calls:
            if tool_call.id in seen:
                raise ProtocolError(f"Duplicate tool call id in one turn: {tool_call.id}")
            seen.add(tool_call.id)

    def _run_tool(self, tool_call: ToolCall, commands: list[str]) -> ChatMessage:
        name = tool_call.function.name
        logger.debug(f"Executing tool: {name} with arguments: {tool_call.function.arguments}")

        try:
            result = self.executor.execute_call(tool_call)
        except ToolError as e:
            logger.error(f"Tool {name} failed: {e}")
            return ChatMessage.tool_result(tool_call.id, json.dumps({"error": str(e), "tool": name}))

        commands.append(result.command)
        return ChatMessage.tool_result(tool_call.id, result.to_content())
