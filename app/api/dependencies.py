"""Shared FastAPI dependencies for the chat core"""

from functools import lru_cache
from fastapi import Depends

from app.config import settings
from app.database.session import SessionLocal
from app.llm.factory import ProviderRegistry, build_default_registry
from app.services.cache import ResponseCache
from app.services.chat_service import ChatService, ConversationLocks
from app.services.conversation_store import ConversationStore, SQLConversationStore
from app.services.message_analyzer import MessageAnalyzer
from app.services.orchestrator import ResponseOrchestrator

# Shared by every request so turns on one conversation queue up
conversation_locks = ConversationLocks()


@lru_cache
def get_provider_registry() -> ProviderRegistry:
    return build_default_registry()


@lru_cache
def get_conversation_store() -> ConversationStore:
    return SQLConversationStore(SessionLocal)


@lru_cache
def get_response_cache() -> ResponseCache:
    return ResponseCache.from_settings()


def get_chat_service(
    store: ConversationStore = Depends(get_conversation_store),
    registry: ProviderRegistry = Depends(get_provider_registry),
    cache: ResponseCache = Depends(get_response_cache)
) -> ChatService:
    """Chat service wired to the configured store, providers and cache"""
    return ChatService(
        store=store,
        orchestrator=ResponseOrchestrator(registry, timeout_seconds=settings.PROVIDER_TIMEOUT_SECONDS),
        cache=cache,
        analyzer=MessageAnalyzer(registry, enabled=settings.MESSAGE_ANALYSIS_ENABLED),
        locks=conversation_locks
    )
