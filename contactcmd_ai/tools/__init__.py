"""Command-suggestion tools offered to the model."""

from contactcmd_ai.tools.catalog import get_all_tools, get_tool
from contactcmd_ai.tools.executor import ToolExecutor, get_tool_executor

__all__ = ["ToolExecutor", "get_all_tools", "get_tool", "get_tool_executor"]
