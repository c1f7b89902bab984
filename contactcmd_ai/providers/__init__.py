"""Completion backends."""

from contactcmd_ai.providers.base import AiProvider
from contactcmd_ai.providers.factory import create_provider
from contactcmd_ai.providers.local import LocalProvider
from contactcmd_ai.providers.registry import LocalModel, ModelRegistry
from contactcmd_ai.providers.remote import RemoteProvider, RemoteProviderConfig

__all__ = [
    "AiProvider",
    "LocalModel",
    "LocalProvider",
    "ModelRegistry",
    "RemoteProvider",
    "RemoteProviderConfig",
    "create_provider",
]
