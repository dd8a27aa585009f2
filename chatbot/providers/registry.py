"""
Provider Registry.

Holds the configured adapters keyed by provider identity. One registry is
created at the composition root and handed to the orchestrator; there is no
module-level singleton.

Usage:
    from chatbot.providers import ProviderRegistry, MockProvider

    registry = ProviderRegistry()
    registry.register(MockProvider())

    provider = registry.get(ProviderId.MOCK)
    for state in registry.states():
        print(state.provider_id, state.is_available)
"""

import logging

from chatbot.catalog import ProviderId
from chatbot.providers.base import ProviderAdapter, ProviderState

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry of provider adapters."""

    def __init__(self, providers: list[ProviderAdapter] | None = None):
        self._providers: dict[ProviderId, ProviderAdapter] = {}
        for provider in providers or []:
            self.register(provider)

    def register(self, provider: ProviderAdapter) -> None:
        """Register an adapter under its provider id, replacing any existing one."""
        provider_id = provider.provider_id
        if provider_id in self._providers:
            logger.warning(f"Replacing existing provider: {provider_id.value}")

        self._providers[provider_id] = provider
        logger.info(
            f"Registered provider: {provider_id.value} ({provider.model_id})",
            extra={"provider_id": provider_id.value},
        )

    def unregister(self, provider_id: ProviderId) -> None:
        """Remove an adapter.

        Raises:
            KeyError: If provider not found
        """
        if provider_id not in self._providers:
            raise KeyError(f"Provider not found: {provider_id.value}")

        del self._providers[provider_id]
        logger.info(f"Unregistered provider: {provider_id.value}")

    def get(self, provider_id: ProviderId) -> ProviderAdapter | None:
        """Return the adapter for ``provider_id``, or None if none is registered."""
        return self._providers.get(provider_id)

    def has_provider(self, provider_id: ProviderId) -> bool:
        return provider_id in self._providers

    def is_available(self, provider_id: ProviderId) -> bool:
        """True only if an adapter is registered and reports itself available."""
        provider = self._providers.get(provider_id)
        return provider is not None and provider.is_available

    def list_providers(self) -> list[ProviderId]:
        return list(self._providers)

    def states(self) -> list[ProviderState]:
        """Availability of every registered provider, computed now."""
        return [provider.state() for provider in self._providers.values()]

    def clear(self) -> None:
        """Remove all providers (useful for testing)."""
        self._providers.clear()
        logger.info("Cleared all providers")
