"""Remote provider for OpenAI-compatible chat-completions APIs.

Works with OpenAI, Groq, Together AI, vLLM and anything else that speaks the
same wire format.
"""

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from contactcmd_ai.config import AiConfig
from contactcmd_ai.errors import ProtocolError, TransportError
from contactcmd_ai.models.messages import ChatMessage, FunctionCall, ProviderResponse, ToolCall
from contactcmd_ai.models.tools import ToolDefinition
from contactcmd_ai.utils.logging import get_logger
from contactcmd_ai.utils.rate_limit import RequestRateLimiter

logger = get_logger(__name__)

COMPLETION_TIMEOUT_SECONDS = 60.0
HEALTH_CHECK_TIMEOUT_SECONDS = 5.0


class _ResponseFunction(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    arguments: str = "{}"


class _ResponseToolCall(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    type: str = "function"
    function: _ResponseFunction


class _ResponseMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: str | None = None
    tool_calls: list[_ResponseToolCall] | None = None


class _Choice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: _ResponseMessage
    finish_reason: str | None = None


class _CompletionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    choices: list[_Choice]


@dataclass
class RemoteProviderConfig:
    """Connection settings for a remote provider."""

    api_key: str
    model: str
    api_url: str = "https://api.openai.com"
    api_endpoint: str = "/v1/chat/completions"
    timeout: float = COMPLETION_TIMEOUT_SECONDS
    health_timeout: float = HEALTH_CHECK_TIMEOUT_SECONDS

    @classmethod
    def from_ai_config(cls, config: AiConfig) -> "RemoteProviderConfig":
        return cls(
            api_key=config.require_api_key(),
            model=config.effective_model(),
            api_url=config.effective_api_url(),
            api_endpoint=config.effective_api_endpoint(),
        )

    @property
    def full_url(self) -> str:
        return f"{self.api_url}{self.api_endpoint}"

    @property
    def models_url(self) -> str:
        """Model listing URL next to the completions endpoint, used for health checks."""
        prefix, found, _ = self.api_endpoint.rpartition("/chat/completions")
        if not found:
            prefix = "/v1"
        return f"{self.api_url}{prefix}/models"


class RemoteProvider:
    """Provider backed by an HTTP chat-completions endpoint.

    Holds no conversation state; one instance (and its HTTP client) can serve
    many sessions at once.
    """

    def __init__(
        self,
        config: RemoteProviderConfig,
        client: httpx.AsyncClient | None = None,
        rate_limiter: RequestRateLimiter | None = None,
    ):
        """Initialize remote provider.

        Args:
            config: Endpoint, credential and model settings
            client: Shared HTTP client (a private one is created if omitted)
            rate_limiter: Optional client-side request throttle
        """
        self.config = config
        self.client = client or httpx.AsyncClient(timeout=config.timeout)
        self.rate_limiter = rate_limiter

    @classmethod
    def from_config(
        cls,
        config: AiConfig,
        client: httpx.AsyncClient | None = None,
    ) -> "RemoteProvider":
        """Build a provider from application configuration."""
        return cls(
            RemoteProviderConfig.from_ai_config(config),
            client=client,
            rate_limiter=RequestRateLimiter(config.requests_per_minute),
        )

    @property
    def name(self) -> str:
        return "Remote API"

    def is_ready(self) -> bool:
        return bool(self.config.api_key)

    def build_request(self, messages: Sequence[ChatMessage], tools: Sequence[ToolDefinition]) -> dict[str, Any]:
        """Build the chat-completions request body."""
        request: dict[str, Any] = {
            "model": self.config.model,
            "messages": [message.to_wire() for message in messages],
        }
        if tools:
            request["tools"] = [tool.to_function_schema() for tool in tools]
            request["tool_choice"] = "auto"
        return request

    async def complete(self, messages: Sequence[ChatMessage], tools: Sequence[ToolDefinition]) -> ProviderResponse:
        request = self.build_request(messages, tools)

        if self.rate_limiter:
            await self.rate_limiter.acquire()

        logger.debug(
            f"Calling {self.config.full_url} with model {self.config.model}, "
            f"{len(messages)} messages, {len(tools)} tools"
        )

        try:
            response = await self.client.post(
                self.config.full_url,
                json=request,
                headers=self._headers(),
                timeout=self.config.timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {self.config.full_url} timed out after {self.config.timeout}s") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {self.config.full_url} failed: {e}") from e

        if not response.is_success:
            body = response.text
            logger.error(f"API error {response.status_code}: {body[:200]}")
            raise TransportError(
                f"API error {response.status_code}: {body}",
                status_code=response.status_code,
                body=body,
            )

        return self._parse_response(response)

    async def health_check(self) -> bool:
        """Lightweight reachability probe with a short timeout."""
        try:
            response = await self.client.get(
                self.config.models_url,
                headers=self._headers(),
                timeout=self.config.health_timeout,
            )
        except httpx.HTTPError as e:
            logger.warning(f"Health check failed: {e}")
            return False
        return response.is_success

    async def aclose(self) -> None:
        await self.client.aclose()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def _parse_response(self, response: httpx.Response) -> ProviderResponse:
        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ProtocolError(f"Response body is not valid JSON: {e}") from e

        try:
            completion = _CompletionResponse.model_validate(payload)
        except ValidationError as e:
            raise ProtocolError(f"Malformed completion response: {e}") from e

        if not completion.choices:
            raise ProtocolError("No completion choices returned")

        choice = completion.choices[0]
        tool_calls = tuple(
            ToolCall(
                id=tc.id,
                call_type=tc.type,
                function=FunctionCall(name=tc.function.name, arguments=tc.function.arguments),
            )
            for tc in choice.message.tool_calls or []
        )

        logger.debug(f"Response received - finish reason: {choice.finish_reason}, tool calls: {len(tool_calls)}")

        return ProviderResponse(
            content=choice.message.content,
            tool_calls=tool_calls,
            is_complete=choice.finish_reason == "stop",
            finish_reason=choice.finish_reason,
        )
