"""Registry of AI providers"""

import logging
from typing import Dict, List, Optional

from app.llm.base import ProviderAdapter
from app.llm.config import llm_config

logger = logging.getLogger(__name__)

KNOWN_PROVIDERS = ("openai", "gemini", "anthropic")


class ProviderRegistry:
    """
    Ordered table of provider adapters

    Registration order is the default fallback order. Adding a provider
    means implementing ProviderAdapter and registering it here; nothing
    else dispatches on provider names.
    """

    def __init__(self, adapters: Optional[List[ProviderAdapter]] = None):
        self._adapters: Dict[str, ProviderAdapter] = {}
        for adapter in adapters or []:
            self.register(adapter)

    def register(self, adapter: ProviderAdapter) -> None:
        """Append an adapter, or replace the one with the same name in place"""
        if adapter.name in self._adapters:
            logger.info(f"Replacing provider adapter: {adapter.name}")
        self._adapters[adapter.name] = adapter

    @property
    def names(self) -> List[str]:
        return list(self._adapters)

    def order_for(self, preferred: Optional[str] = None) -> List[ProviderAdapter]:
        """
        Providers in the order they should be tried

        Args:
            preferred: Provider the caller prefers; ignored when unknown

        Returns:
            Preferred adapter first, then the others in default order
        """
        adapters = list(self._adapters.values())
        if preferred and preferred in self._adapters:
            first = self._adapters[preferred]
            return [first] + [a for a in adapters if a is not first]
        return adapters

    def __len__(self) -> int:
        return len(self._adapters)


def create_provider(name: str) -> ProviderAdapter:
    """Instantiate the adapter for a known provider name"""
    if name == "openai":
        from app.llm.generator import OpenAIGenerator
        return OpenAIGenerator()
    if name == "gemini":
        from app.llm.generator_gemini import GeminiGenerator
        return GeminiGenerator()
    if name == "anthropic":
        from app.llm.generator_anthropic import AnthropicGenerator
        return AnthropicGenerator()
    raise ValueError(f"Unknown AI provider: {name}")


def build_default_registry(provider_order: Optional[List[str]] = None) -> ProviderRegistry:
    """Register every configured provider in the configured order"""
    registry = ProviderRegistry()

    for name in provider_order or llm_config.provider_order:
        name = name.strip().lower()
        if name not in KNOWN_PROVIDERS:
            logger.warning(f"Ignoring unknown AI provider in AI_PROVIDER_ORDER: {name}")
            continue

        adapter = create_provider(name)
        if not adapter.is_configured:
            logger.warning(f"AI provider {name} skipped: API key not set")
            continue

        registry.register(adapter)
        logger.info(f"✅ AI provider registered: {name}")

    if not len(registry):
        logger.warning("No AI provider configured, every reply will be the fallback message")

    return registry
