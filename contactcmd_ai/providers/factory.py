"""Provider selection from configuration."""

import httpx

from contactcmd_ai.config import AiConfig, ProviderType
from contactcmd_ai.errors import ConfigError
from contactcmd_ai.providers.base import AiProvider
from contactcmd_ai.providers.local import LocalProvider
from contactcmd_ai.providers.registry import ModelRegistry
from contactcmd_ai.providers.remote import RemoteProvider


def create_provider(
    config: AiConfig,
    registry: ModelRegistry | None = None,
    client: httpx.AsyncClient | None = None,
) -> AiProvider:
    """Create the provider selected by the configuration.

    Args:
        config: Loaded AI configuration
        registry: Model registry for the local backend (default registry if omitted)
        client: Shared HTTP client for the remote backend

    Raises:
        ConfigError: If no provider is selected or it lacks what it needs
    """
    match config.provider_type:
        case ProviderType.REMOTE:
            return RemoteProvider.from_config(config, client=client)
        case ProviderType.LOCAL:
            return LocalProvider.from_config(config, registry or ModelRegistry.default(config.models_dir))
        case _:
            raise ConfigError("AI not configured (set AI_PROVIDER to 'remote' or 'local')")
