"""Chat turn processing"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import asyncio
import logging
import math

from app.schemas.chat import (
    ConversationDetailResponse,
    ConversationListResponse,
    ConversationOut,
    ConversationSummaryOut,
    PaginationOut
)
from app.services.cache import ResponseCache
from app.services.conversation_store import ConversationStore, NewMessage
from app.services.message_analyzer import MessageAnalyzer
from app.services.orchestrator import OrchestratorResult, ResponseOrchestrator
from app.services.session_resolver import ConversationSessionResolver
from app.utils.validators import (
    validate_conversation_id,
    validate_goal,
    validate_message_content,
    validate_pagination
)

logger = logging.getLogger(__name__)


class ConversationLocks:
    """
    One asyncio.Lock per conversation id

    Turns on the same conversation run one at a time so appends never
    interleave. Locks are dropped once nobody holds or waits for them.
    """

    def __init__(self):
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, conversation_id: str):
        lock = self._locks.setdefault(conversation_id, asyncio.Lock())
        self._users[conversation_id] = self._users.get(conversation_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[conversation_id] -= 1
            if not self._users[conversation_id]:
                del self._users[conversation_id]
                del self._locks[conversation_id]

    def __len__(self) -> int:
        return len(self._locks)


@dataclass(frozen=True)
class ChatTurnRequest:
    message: str
    goal: str
    conversation_id: Optional[str] = None
    tone: Optional[str] = None
    language: Optional[str] = None
    ai_provider: Optional[str] = None


@dataclass(frozen=True)
class ChatTurnResult:
    response: str
    conversation_id: str
    message_id: str
    timestamp: datetime
    tone: Optional[str]
    language: Optional[str]
    ai_provider: str


class ChatService:
    """Ties resolver, orchestrator, store and cache together for one user"""

    def __init__(
        self,
        store: ConversationStore,
        orchestrator: ResponseOrchestrator,
        cache: ResponseCache,
        analyzer: Optional[MessageAnalyzer] = None,
        locks: Optional[ConversationLocks] = None
    ):
        self.store = store
        self.orchestrator = orchestrator
        self.cache = cache
        self.analyzer = analyzer
        self.locks = locks if locks is not None else ConversationLocks()
        self.resolver = ConversationSessionResolver(store)

    async def send_message(
        self,
        user_id: str,
        request: ChatTurnRequest,
        default_provider: Optional[str] = None
    ) -> ChatTurnResult:
        """
        Process one chat turn

        Args:
            user_id: Authenticated caller
            request: Message, goal and optional conversation id
            default_provider: Caller's saved provider preference

        Returns:
            ChatTurnResult describing the stored assistant message

        Raises:
            ValidationException: bad message, goal or id
            ConversationNotFoundException: id not owned by the caller
            DatabaseException: the turn could not be stored
        """
        message = validate_message_content(request.message)
        goal = validate_goal(request.goal)

        if request.conversation_id:
            session = await self.resolver.resolve(user_id, goal, request.conversation_id)
            async with self.locks.hold(session.conversation.id):
                # Another turn may have landed while we waited
                conversation = await self.store.get_conversation(session.conversation.id, user_id)
                result, turn = await self._reply(
                    message, conversation.goal, conversation.history(), request, default_provider
                )
                updated = await self.store.append_messages(conversation.id, user_id, turn)
        else:
            # Nobody else can see a new thread before it is committed
            result, turn = await self._reply(message, goal, [], request, default_provider)
            session = await self.resolver.resolve(user_id, goal, initial_messages=turn)
            updated = session.conversation

        await self.cache.invalidate_user(user_id)

        assistant_message = updated.messages[-1]
        logger.info(
            f"Chat message processed: user={user_id} conversation={updated.id} "
            f"provider={result.provider_used} messages={updated.message_count}"
        )

        return ChatTurnResult(
            response=assistant_message.content,
            conversation_id=updated.id,
            message_id=assistant_message.id,
            timestamp=assistant_message.timestamp,
            tone=result.tone,
            language=assistant_message.language,
            ai_provider=result.provider_used
        )

    async def _reply(
        self,
        message: str,
        goal: str,
        history: List[dict],
        request: ChatTurnRequest,
        default_provider: Optional[str]
    ) -> Tuple[OrchestratorResult, List[NewMessage]]:
        """Generate the assistant reply and the user/assistant pair to store"""
        language = request.language or await self._detect_language(message)
        tone = request.tone or await self._analyze_tone(message, language)

        result = await self.orchestrator.generate(
            message=message,
            goal=goal,
            tone=tone,
            history=history,
            language=language,
            preferred_provider=request.ai_provider or default_provider
        )

        return result, [
            NewMessage(role="user", content=message, tone=tone, language=language),
            NewMessage(role="assistant", content=result.text, tone=result.tone, language=language)
        ]

    async def _detect_language(self, message: str) -> Optional[str]:
        if self.analyzer is None:
            return None
        return await self.analyzer.detect_language(message)

    async def _analyze_tone(self, message: str, language: Optional[str]) -> Optional[str]:
        if self.analyzer is None:
            return None
        return await self.analyzer.analyze_tone(message, language)

    async def get_conversation(self, user_id: str, conversation_id: str) -> Dict[str, Any]:
        """Conversation detail payload, read through the cache"""
        conversation_id = validate_conversation_id(conversation_id)

        async def load() -> Dict[str, Any]:
            conversation = await self.store.get_conversation(conversation_id, user_id)
            return ConversationDetailResponse(
                conversation=ConversationOut.model_validate(conversation)
            ).model_dump(mode="json", by_alias=True)

        return await self.cache.get_or_load(
            user_id, f"/chat/{conversation_id}", None, self.cache.ttl_detail, load
        )

    async def list_conversations(self, user_id: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """Conversation list payload, read through the cache"""
        validate_pagination(page, limit)

        async def load() -> Dict[str, Any]:
            result = await self.store.list_conversations(user_id, page, limit)
            return ConversationListResponse(
                conversations=[ConversationSummaryOut.model_validate(item) for item in result.items],
                pagination=PaginationOut(
                    page=page,
                    limit=limit,
                    total=result.total,
                    total_pages=math.ceil(result.total / limit),
                    has_next=page * limit < result.total,
                    has_prev=page > 1
                )
            ).model_dump(mode="json", by_alias=True)

        return await self.cache.get_or_load(
            user_id, "/chat", {"page": page, "limit": limit}, self.cache.ttl_list, load
        )

    async def delete_conversation(self, user_id: str, conversation_id: str) -> str:
        conversation_id = validate_conversation_id(conversation_id)

        async with self.locks.hold(conversation_id):
            await self.store.delete_conversation(conversation_id, user_id)

        await self.cache.invalidate_user(user_id)
        logger.info(f"Conversation deleted: user={user_id} conversation={conversation_id}")
        return conversation_id
