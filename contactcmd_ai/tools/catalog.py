"""Static catalog of command-suggestion tools.

These tools generate command suggestions only. Nothing here can see contacts,
messages or any other stored record.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from contactcmd_ai.models.tools import ToolDefinition, ToolParameter

DEFAULT_RECENT_DAYS = 7


class ToolInput(BaseModel):
    """Base input schema: strict types, undeclared keys dropped."""

    model_config = ConfigDict(extra="ignore", strict=True, str_strip_whitespace=True, frozen=True)


class EmptyInput(ToolInput):
    """Input schema for tools that take no parameters."""


class SearchInput(ToolInput):
    """Input schema for suggest_search."""

    query: str | None = None
    name: str | None = None
    location: str | None = None
    organization: str | None = None

    @field_validator("location")
    @classmethod
    def strip_in_prefix(cls, v: str | None) -> str | None:
        # Models like to echo the search syntax back ("in miami")
        if v and v.lower().startswith("in "):
            return v[3:].strip()
        return v

    @field_validator("organization")
    @classmethod
    def strip_at_prefix(cls, v: str | None) -> str | None:
        if v and v.lower().startswith("at "):
            return v[3:].strip()
        return v


class ShowInput(ToolInput):
    """Input schema for suggest_show."""

    name: str = Field(..., min_length=1)


class MessagesInput(ToolInput):
    """Input schema for suggest_messages."""

    contact: str = Field(..., min_length=1)


class RecentInput(ToolInput):
    """Input schema for suggest_recent."""

    days: int | None = Field(default=None, ge=1)


SUGGEST_SEARCH = ToolDefinition(
    name="suggest_search",
    description=(
        "Search contacts. Use location for cities/states, organization for companies, "
        "name for people, query for general terms."
    ),
    parameters=(
        ToolParameter.optional_param("query", "General search terms (searches all fields)"),
        ToolParameter.optional_param("name", "Person's name"),
        ToolParameter.optional_param("location", "City or state (e.g., 'miami', 'texas')"),
        ToolParameter.optional_param("organization", "Company name (e.g., 'google', 'att')"),
    ),
    input_schema_class=SearchInput,
)

SUGGEST_LIST = ToolDefinition(
    name="suggest_list",
    description="Suggest the list command to show all contacts.",
    parameters=(),
    input_schema_class=EmptyInput,
)

SUGGEST_SHOW = ToolDefinition(
    name="suggest_show",
    description="Suggest showing a specific contact's details.",
    parameters=(ToolParameter.required_param("name", "Contact name to show"),),
    input_schema_class=ShowInput,
)

SUGGEST_MESSAGES = ToolDefinition(
    name="suggest_messages",
    description="Suggest viewing messages with a contact.",
    parameters=(ToolParameter.required_param("contact", "Contact name to view messages with"),),
    input_schema_class=MessagesInput,
)

SUGGEST_RECENT = ToolDefinition(
    name="suggest_recent",
    description="Suggest viewing recently messaged contacts (iMessage/SMS).",
    parameters=(
        ToolParameter.optional_param(
            "days", f"Number of days to look back (default: {DEFAULT_RECENT_DAYS})", "integer"
        ),
    ),
    input_schema_class=RecentInput,
)

SUGGEST_BROWSE = ToolDefinition(
    name="suggest_browse",
    description="Suggest browsing previous search results in TUI.",
    parameters=(),
    input_schema_class=EmptyInput,
)

_CATALOG: tuple[ToolDefinition, ...] = (
    SUGGEST_SEARCH,
    SUGGEST_LIST,
    SUGGEST_SHOW,
    SUGGEST_MESSAGES,
    SUGGEST_RECENT,
    SUGGEST_BROWSE,
)


def get_all_tools() -> tuple[ToolDefinition, ...]:
    """Get all tools the model may call, in catalog order."""
    return _CATALOG


def get_tool(name: str) -> ToolDefinition | None:
    """Look up a catalog entry by name."""
    for tool in _CATALOG:
        if tool.name == name:
            return tool
    return None


def get_tool_names() -> list[str]:
    return [tool.name for tool in _CATALOG]
