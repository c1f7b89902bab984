"""Provider configuration loaded from the environment."""

import os
from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from contactcmd_ai.errors import ConfigError

DEFAULT_API_URL = "https://api.openai.com"
DEFAULT_API_ENDPOINT = "/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_ITERATIONS = 8

ENV_AI_PROVIDER = "AI_PROVIDER"
ENV_AI_API_KEY = "AI_API_KEY"
ENV_AI_API_URL = "AI_API_URL"
ENV_AI_API_ENDPOINT = "AI_API_ENDPOINT"
ENV_AI_MODEL = "AI_MODEL"
ENV_AI_LOCAL_MODEL = "AI_LOCAL_MODEL"
ENV_AI_MODELS_DIR = "AI_MODELS_DIR"
ENV_AI_MAX_ITERATIONS = "AI_MAX_ITERATIONS"
ENV_AI_MAX_MESSAGE_TOKENS = "AI_MAX_MESSAGE_TOKENS"
ENV_AI_REQUESTS_PER_MINUTE = "AI_REQUESTS_PER_MINUTE"


class ProviderType(StrEnum):
    """Which backend answers completions."""

    NONE = "none"
    REMOTE = "remote"
    LOCAL = "local"

    @classmethod
    def parse(cls, value: str | None) -> "ProviderType":
        """Parse a provider name, treating anything unrecognised as NONE."""
        if not value:
            return cls.NONE
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.NONE


class LocalModelId(StrEnum):
    """Supported on-device models."""

    QWEN3_4B = "qwen3-4b"
    GEMMA3N_E4B = "gemma3n-e4b"
    LLAMA31_8B = "llama31-8b"
    MAGISTRAL_SMALL_24B = "magistral-small-24b"

    @classmethod
    def parse(cls, value: str | None) -> "LocalModelId | None":
        """Parse a model id, accepting underscore and dotted spellings."""
        if not value:
            return None
        normalized = value.strip().lower().replace("_", "-")
        if normalized == "llama3.1-8b":
            normalized = cls.LLAMA31_8B.value
        try:
            return cls(normalized)
        except ValueError:
            return None


def default_models_dir() -> Path:
    """Directory holding downloaded GGUF files."""
    return Path.home() / ".config" / "contactcmd" / "models"


class AiConfig(BaseModel):
    """Configuration for the AI provider and the suggestion loop."""

    provider_type: ProviderType = ProviderType.NONE
    api_key: str | None = None
    api_url: str | None = None
    api_endpoint: str | None = None
    model: str | None = None
    local_model: LocalModelId | None = None
    models_dir: Path = Field(default_factory=default_models_dir)

    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=1)
    max_message_tokens: int = Field(default=2000, ge=1)
    requests_per_minute: int = Field(default=60, ge=1)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AiConfig":
        """Load configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Populated configuration; unset values keep their defaults
        """
        env = os.environ if environ is None else environ

        values: dict[str, object] = {
            "provider_type": ProviderType.parse(env.get(ENV_AI_PROVIDER)),
            "api_key": env.get(ENV_AI_API_KEY) or None,
            "api_url": env.get(ENV_AI_API_URL) or None,
            "api_endpoint": env.get(ENV_AI_API_ENDPOINT) or None,
            "model": env.get(ENV_AI_MODEL) or None,
            "local_model": LocalModelId.parse(env.get(ENV_AI_LOCAL_MODEL)),
        }
        if env.get(ENV_AI_MODELS_DIR):
            values["models_dir"] = Path(env[ENV_AI_MODELS_DIR]).expanduser()

        for key, env_name in (
            ("max_iterations", ENV_AI_MAX_ITERATIONS),
            ("max_message_tokens", ENV_AI_MAX_MESSAGE_TOKENS),
            ("requests_per_minute", ENV_AI_REQUESTS_PER_MINUTE),
        ):
            raw = env.get(env_name)
            if raw:
                try:
                    values[key] = int(raw)
                except ValueError as e:
                    raise ConfigError(f"{env_name} must be an integer, got {raw!r}") from e

        try:
            return cls.model_validate(values)
        except ValidationError as e:
            problems = "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors())
            raise ConfigError(f"Invalid AI configuration: {problems}") from e

    def is_configured(self) -> bool:
        """Check if a provider is selected and has what it needs."""
        match self.provider_type:
            case ProviderType.REMOTE:
                return bool(self.api_key)
            case ProviderType.LOCAL:
                return self.local_model is not None
            case _:
                return False

    def require_api_key(self) -> str:
        """Return the API key or fail with a ConfigError."""
        if not self.api_key:
            raise ConfigError(f"API key not configured (set {ENV_AI_API_KEY})")
        return self.api_key

    def effective_api_url(self) -> str:
        return (self.api_url or DEFAULT_API_URL).rstrip("/")

    def effective_api_endpoint(self) -> str:
        endpoint = self.api_endpoint or DEFAULT_API_ENDPOINT
        return endpoint if endpoint.startswith("/") else f"/{endpoint}"

    def effective_model(self) -> str:
        return self.model or DEFAULT_MODEL
