"""LLM module - provider adapters behind one generate capability"""

from app.llm.base import ProviderAdapter, ProviderReply
from app.llm.factory import (
    KNOWN_PROVIDERS,
    ProviderRegistry,
    build_default_registry,
    create_provider
)

__all__ = [
    'ProviderAdapter',
    'ProviderReply',
    'KNOWN_PROVIDERS',
    'ProviderRegistry',
    'build_default_registry',
    'create_provider'
]
