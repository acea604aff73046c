"""Factory for creating and managing provider adapters."""

import logging
from typing import Any, Dict, List, Optional, Type

from ...domain.ports.provider_adapter import ProviderAdapter
from .bigkinds_adapter import BigKindsAdapter
from .factiverse_adapter import FactiverseAdapter
from .google_adapter import GoogleFactCheckAdapter

logger = logging.getLogger(__name__)


class ProviderFactory:
    """Factory for creating and managing provider adapters.

    This factory maintains a registry of available adapter classes
    and handles their lifecycle (initialization, shutdown). Active
    providers are reported in registration order, which is also the
    order the verification service queries them in.
    """

    def __init__(self, register_defaults: bool = True):
        """Initialize the factory.

        Args:
            register_defaults: Register the built-in Google, Factiverse and BigKinds adapters
        """
        self._provider_registry: Dict[str, Type[ProviderAdapter]] = {}
        self._active_providers: Dict[str, ProviderAdapter] = {}

        if register_defaults:
            self.register_provider("google", GoogleFactCheckAdapter)
            self.register_provider("factiverse", FactiverseAdapter)
            self.register_provider("bigkinds", BigKindsAdapter)

    def register_provider(self, name: str, provider_class: Type[ProviderAdapter]) -> None:
        """Register a new provider adapter class.

        Args:
            name: Unique identifier for the provider
            provider_class: The adapter class to register

        Raises:
            ValueError: If the name is already registered
        """
        if name in self._provider_registry:
            raise ValueError(f"Provider {name} already registered")
        self._provider_registry[name] = provider_class

    async def create_provider(self, name: str, **config: Any) -> ProviderAdapter:
        """Create and initialize a new provider instance.

        Args:
            name: Name of the provider to create
            **config: Adapter constructor arguments

        Returns:
            Initialized provider instance

        Raises:
            ValueError: If provider not found
            RuntimeError: If initialization fails
        """
        if name not in self._provider_registry:
            raise ValueError(f"Provider {name} not registered")

        provider = self._provider_registry[name](**config)
        try:
            await provider.initialize()
        except Exception as e:
            raise RuntimeError(f"Failed to initialize provider {name}: {e}") from e

        self._active_providers[name] = provider
        return provider

    def add_provider(self, name: str, provider: ProviderAdapter) -> None:
        """Activate an already constructed adapter under ``name``."""
        self._active_providers[name] = provider

    def get_provider(self, name: str) -> Optional[ProviderAdapter]:
        """Get an active provider instance by name.

        Args:
            name: Name of the provider

        Returns:
            Provider instance if active, None otherwise
        """
        return self._active_providers.get(name)

    def active_provider_ids(self) -> List[str]:
        """Ids of active providers, in registration order."""
        ordered = [name for name in self._provider_registry if name in self._active_providers]
        extra = [name for name in self._active_providers if name not in self._provider_registry]
        return ordered + extra

    async def shutdown_provider(self, name: str) -> None:
        """Shutdown a specific provider.

        Args:
            name: Name of the provider to shutdown
        """
        provider = self._active_providers.pop(name, None)
        if provider:
            try:
                await provider.shutdown()
            except Exception as e:
                logger.warning(f"⚠️ Error shutting down provider {name}: {e}")

    async def shutdown_all(self) -> None:
        """Shutdown all active providers."""
        for name in list(self._active_providers.keys()):
            await self.shutdown_provider(name)

    @property
    def available_providers(self) -> Dict[str, bool]:
        """Get dictionary of registered or active providers and their availability."""
        names = list(self._provider_registry) + [
            name for name in self._active_providers if name not in self._provider_registry
        ]
        status = {}
        for name in names:
            provider = self.get_provider(name)
            status[name] = provider is not None and provider.is_available
        return status
