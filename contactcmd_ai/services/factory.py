"""Session wiring from configuration."""

import httpx

from contactcmd_ai.config import AiConfig
from contactcmd_ai.providers.base import AiProvider
from contactcmd_ai.providers.factory import create_provider
from contactcmd_ai.providers.registry import ModelRegistry
from contactcmd_ai.services.session import AiChatSession
from contactcmd_ai.utils.tokens import TokenCounter


def create_session(
    config: AiConfig,
    provider: AiProvider | None = None,
    registry: ModelRegistry | None = None,
    client: httpx.AsyncClient | None = None,
) -> AiChatSession:
    """Create a session whose provider and limits come from configuration.

    Args:
        config: Loaded AI configuration
        provider: Already-built provider to use instead of the configured one
        registry: Model registry for the local backend
        client: Shared HTTP client for the remote backend

    Raises:
        ConfigError: If the configured provider cannot be built
    """
    return AiChatSession(
        provider or create_provider(config, registry=registry, client=client),
        max_iterations=config.max_iterations,
        token_counter=TokenCounter(config.max_message_tokens),
    )
