"""Tool executor that turns tool calls into command suggestions.

The executor has no access to user data. Its constructor takes nothing and
every method takes only a tool name plus the model's arguments, so there is no
way to hand it a database, a contact or a message. Results are command strings
for the user to run, never data.
"""

import json
import shlex
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from contactcmd_ai.errors import InvalidArgumentsError, UnknownToolError
from contactcmd_ai.models.messages import ToolCall
from contactcmd_ai.models.tools import ToolResult
from contactcmd_ai.tools.catalog import (
    DEFAULT_RECENT_DAYS,
    MessagesInput,
    RecentInput,
    SearchInput,
    ShowInput,
    get_tool,
)
from contactcmd_ai.utils.logging import get_logger

logger = get_logger(__name__)


def _flag(name: str, value: str | int) -> str:
    return f"--{name} {shlex.quote(str(value))}"


def _validation_detail(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(loc) for loc in err["loc"]) or "arguments"
        parts.append(f"{location}: {err['msg']}")
    return "; ".join(parts)


class ToolExecutor:
    """Stateless executor producing command suggestions (no data access)."""

    def __init__(self) -> None:
        self._builders: dict[str, Callable[[Any], ToolResult]] = {
            "suggest_search": self._suggest_search,
            "suggest_list": lambda _: ToolResult(command="/list", explanation="List all contacts"),
            "suggest_show": self._suggest_show,
            "suggest_messages": self._suggest_messages,
            "suggest_recent": self._suggest_recent,
            "suggest_browse": lambda _: ToolResult(
                command="/browse", explanation="Browse previous search results in TUI"
            ),
        }

    def execute(self, name: str, arguments: Mapping[str, Any]) -> ToolResult:
        """Translate one tool invocation into a command suggestion.

        Args:
            name: Catalog tool name
            arguments: Decoded arguments object; undeclared keys are ignored

        Returns:
            The suggested command and a short explanation

        Raises:
            UnknownToolError: If the name matches no catalog entry
            InvalidArgumentsError: If a required parameter is missing or a type is wrong
        """
        tool = get_tool(name)
        builder = self._builders.get(name)
        if tool is None or builder is None:
            raise UnknownToolError(name)

        if not isinstance(arguments, Mapping):
            raise InvalidArgumentsError(name, "arguments must be a JSON object")

        try:
            parsed = tool.parse_input(dict(arguments))
        except ValidationError as e:
            raise InvalidArgumentsError(name, _validation_detail(e)) from e

        result = builder(parsed)
        logger.debug(f"Tool {name} suggested: {result.command}")
        return result

    def execute_call(self, tool_call: ToolCall) -> ToolResult:
        """Decode a tool call's JSON arguments and execute it."""
        raw = tool_call.function.arguments
        try:
            arguments = json.loads(raw) if raw and raw.strip() else {}
        except json.JSONDecodeError as e:
            if get_tool(tool_call.function.name) is None:
                raise UnknownToolError(tool_call.function.name) from e
            raise InvalidArgumentsError(tool_call.function.name, f"arguments are not valid JSON ({e.msg})") from e

        return self.execute(tool_call.function.name, arguments)

    def _suggest_search(self, args: SearchInput) -> ToolResult:
        flags = [
            _flag(field, value)
            for field, value in (
                ("query", args.query),
                ("name", args.name),
                ("location", args.location),
                ("organization", args.organization),
            )
            if value
        ]
        if not flags:
            return ToolResult(command="/search", explanation="Search for contacts")

        terms = [value for value in (args.query, args.name) if value]
        explanation = "Search for " + (" ".join(terms) if terms else "contacts")
        if args.location:
            explanation += f" in {args.location}"
        if args.organization:
            explanation += f" at {args.organization}"

        return ToolResult(command="/search " + " ".join(flags), explanation=explanation)

    def _suggest_show(self, args: ShowInput) -> ToolResult:
        return ToolResult(command=f"/show {_flag('name', args.name)}", explanation=f"Show details for {args.name}")

    def _suggest_messages(self, args: MessagesInput) -> ToolResult:
        return ToolResult(
            command=f"/messages {_flag('contact', args.contact)}",
            explanation=f"View messages with {args.contact}",
        )

    def _suggest_recent(self, args: RecentInput) -> ToolResult:
        if args.days is None or args.days == DEFAULT_RECENT_DAYS:
            return ToolResult(command="/recent", explanation="View recently messaged contacts")
        return ToolResult(
            command=f"/recent {_flag('days', args.days)}",
            explanation=f"View contacts messaged in the last {args.days} days",
        )


_tool_executor: ToolExecutor | None = None


def get_tool_executor() -> ToolExecutor:
    """Get or create the shared executor instance."""
    global _tool_executor
    if _tool_executor is None:
        _tool_executor = ToolExecutor()
    return _tool_executor
