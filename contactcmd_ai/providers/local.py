"""Local provider running GGUF models on-device with llama-cpp-python.

Small local models do not speak the function-calling wire format, so tools are
described in the system block and the model is asked to answer with
`<tool_call>{"name": ..., "arguments": {...}}</tool_call>` blocks, which are
parsed back into regular tool calls.
"""

import asyncio
import json
import re
from collections.abc import Sequence
from typing import Any, Protocol

from contactcmd_ai.config import AiConfig
from contactcmd_ai.errors import ConfigError, ProtocolError
from contactcmd_ai.models.messages import ChatMessage, FunctionCall, ProviderResponse, ToolCall
from contactcmd_ai.models.tools import ToolDefinition
from contactcmd_ai.providers.registry import LocalModel, ModelRegistry
from contactcmd_ai.utils.logging import get_logger

logger = get_logger(__name__)

END_TAG = "<|end|>"
STOP_SEQUENCES = [END_TAG, "<|endoftext|>"]
MAX_NEW_TOKENS = 2048

_ROLE_TAGS = {
    "system": "<|system|>",
    "user": "<|user|>",
    "assistant": "<|assistant|>",
    "tool": "<|tool|>",
}
_TOOL_CALL_PATTERN = re.compile(r"<tool_call>(.*?)</tool_call>", re.DOTALL)


class CompletionBackend(Protocol):
    """The slice of llama_cpp.Llama used by this provider."""

    def create_completion(self, prompt: str, **kwargs: Any) -> dict[str, Any]: ...


def describe_tools(tools: Sequence[ToolDefinition]) -> str:
    """Render the tool catalog and the calling convention as prompt text."""
    if not tools:
        return ""

    lines = ["", "", "Available tools:"]
    for tool in tools:
        lines.append(f"- {tool.name}: {tool.description}")
        if tool.parameters:
            lines.append("  Parameters:")
            for param in tool.parameters:
                requirement = "required" if param.required else "optional"
                lines.append(f"    - {param.name} ({param.type}, {requirement}): {param.description}")
    lines.extend(
        [
            "",
            "To use a tool, respond with:",
            "<tool_call>",
            '{"name": "tool_name", "arguments": {"param": "value"}}',
            "</tool_call>",
        ]
    )
    return "\n".join(lines)


def render_prompt(messages: Sequence[ChatMessage], tools: Sequence[ToolDefinition]) -> str:
    """Convert the conversation into a tagged prompt ending with an open assistant turn."""
    tool_info = describe_tools(tools)
    parts: list[str] = []
    saw_system = False

    for message in messages:
        body = message.content or ""
        if message.role == "system":
            body += tool_info
            saw_system = True
        elif message.role == "assistant" and message.tool_calls:
            body = "\n".join(
                "<tool_call>\n"
                f'{{"name": {json.dumps(tc.function.name)}, "arguments": {tc.function.arguments}}}'
                "\n</tool_call>"
                for tc in message.tool_calls
            )
        parts.append(f"{_ROLE_TAGS[message.role]}\n{body}\n{END_TAG}\n")

    if tool_info and not saw_system:
        parts.insert(0, f"{_ROLE_TAGS['system']}\n{tool_info.lstrip()}\n{END_TAG}\n")

    parts.append(f"{_ROLE_TAGS['assistant']}\n")
    return "".join(parts)


def parse_tool_calls(text: str) -> list[ToolCall]:
    """Extract `<tool_call>` blocks, in order, skipping ones that are not valid JSON."""
    tool_calls: list[ToolCall] = []
    for match in _TOOL_CALL_PATTERN.finditer(text):
        try:
            parsed = json.loads(match.group(1).strip())
        except json.JSONDecodeError:
            logger.warning(f"Skipping unparseable tool call block: {match.group(1)[:100]}")
            continue

        if not isinstance(parsed, dict) or not isinstance(parsed.get("name"), str):
            logger.warning(f"Skipping tool call block without a name: {match.group(1)[:100]}")
            continue

        arguments = parsed.get("arguments", {})
        if not isinstance(arguments, str):
            arguments = json.dumps(arguments)

        tool_calls.append(
            ToolCall(
                id=f"call_{len(tool_calls)}",
                call_type="function",
                function=FunctionCall(name=parsed["name"], arguments=arguments),
            )
        )
    return tool_calls


def strip_tool_calls(text: str) -> str:
    """Remove tool call blocks and leftover stop markers from generated text."""
    cleaned = _TOOL_CALL_PATTERN.sub("", text)
    for marker in STOP_SEQUENCES:
        cleaned = cleaned.replace(marker, "")
    return cleaned.strip()


class LocalProvider:
    """Provider backed by on-device inference."""

    def __init__(self, model: LocalModel, backend: CompletionBackend, max_new_tokens: int = MAX_NEW_TOKENS):
        """Initialize local provider.

        Args:
            model: Registry entry of the loaded model
            backend: Loaded inference backend (a llama_cpp.Llama instance)
            max_new_tokens: Generation ceiling per completion
        """
        self.model = model
        self.backend = backend
        self.max_new_tokens = max_new_tokens
        # One generation at a time per loaded model
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config: AiConfig, registry: ModelRegistry) -> "LocalProvider":
        """Load the configured model from disk."""
        if config.local_model is None:
            raise ConfigError("No local model configured")

        model = registry.get(config.local_model)
        if model is None:
            raise ConfigError(f"Unknown model: {config.local_model}")

        path = registry.local_path(model)
        if not registry.is_downloaded(model):
            raise ConfigError(f"Model not downloaded. Please run setup to download {model.name} ({path})")

        try:
            from llama_cpp import Llama
        except ImportError as e:
            raise ConfigError(
                "Local inference requires llama-cpp-python (pip install 'contactcmd-ai[local]')"
            ) from e

        logger.info(f"Loading local model {model.name} from {path}")
        backend = Llama(model_path=str(path), n_ctx=model.context_length, verbose=False)
        return cls(model, backend)

    @property
    def name(self) -> str:
        return self.model.name

    def is_ready(self) -> bool:
        return self.backend is not None

    async def complete(self, messages: Sequence[ChatMessage], tools: Sequence[ToolDefinition]) -> ProviderResponse:
        prompt = render_prompt(messages, tools)

        async with self._lock:
            output = await asyncio.to_thread(self._generate, prompt)

        try:
            choice = output["choices"][0]
            text = choice.get("text") or ""
            finish_reason = choice.get("finish_reason")
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise ProtocolError(f"Malformed local completion output: {e}") from e

        tool_calls = parse_tool_calls(text)
        if tool_calls:
            logger.debug(f"Local model requested {len(tool_calls)} tools")
            return ProviderResponse(
                content=strip_tool_calls(text) or None,
                tool_calls=tuple(tool_calls),
                is_complete=False,
                finish_reason="tool_calls",
            )

        # Stop sequence or end-of-generation token both come back as "stop"
        return ProviderResponse(
            content=strip_tool_calls(text),
            is_complete=finish_reason == "stop",
            finish_reason=finish_reason,
        )

    def _generate(self, prompt: str) -> dict[str, Any]:
        return self.backend.create_completion(
            prompt,
            max_tokens=self.max_new_tokens,
            stop=STOP_SEQUENCES,
            temperature=0.1,
        )
