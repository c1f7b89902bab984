"""Tool catalog entry and tool result types."""

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class ToolParameter:
    """Parameter definition for a tool."""

    name: str
    description: str
    type: str
    required: bool = False
    enum_values: tuple[str, ...] | None = None

    @classmethod
    def required_param(cls, name: str, description: str, param_type: str = "string") -> "ToolParameter":
        return cls(name=name, description=description, type=param_type, required=True)

    @classmethod
    def optional_param(cls, name: str, description: str, param_type: str = "string") -> "ToolParameter":
        return cls(name=name, description=description, type=param_type, required=False)


@dataclass(frozen=True)
class ToolDefinition:
    """Definition of a tool the model may call."""

    name: str
    description: str
    parameters: tuple[ToolParameter, ...]
    input_schema_class: type[BaseModel]

    @property
    def required_parameters(self) -> list[str]:
        return [param.name for param in self.parameters if param.required]

    def get_json_schema(self) -> dict[str, Any]:
        """JSON schema of this tool's arguments object."""
        properties: dict[str, Any] = {}
        for param in self.parameters:
            prop: dict[str, Any] = {"type": param.type, "description": param.description}
            if param.enum_values:
                prop["enum"] = list(param.enum_values)
            properties[param.name] = prop

        return {
            "type": "object",
            "properties": properties,
            "required": self.required_parameters,
        }

    def to_function_schema(self) -> dict[str, Any]:
        """Function descriptor for the chat-completions `tools` array."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.get_json_schema(),
            },
        }

    def parse_input(self, raw_input: dict[str, Any]) -> BaseModel:
        """Parse and validate tool input."""
        return self.input_schema_class.model_validate(raw_input)


class ToolResult(BaseModel):
    """Result of executing a tool: a command suggestion and nothing else."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    command: str
    explanation: str

    def to_content(self) -> str:
        """Serialize for a tool turn."""
        return json.dumps({"command": self.command, "explanation": self.explanation})
