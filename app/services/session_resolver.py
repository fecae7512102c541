"""Map an inbound chat request to a conversation"""

from dataclasses import dataclass
from typing import Optional, Sequence
import logging

from app.services.conversation_store import ConversationRecord, ConversationStore, NewMessage
from app.utils.validators import validate_conversation_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedSession:
    conversation: ConversationRecord
    created: bool


class ConversationSessionResolver:
    """
    Load the caller's conversation or start a new one

    Without an id a new thread is always created; the latest conversation
    is never picked up implicitly. A new thread is written together with
    its opening messages, so it never exists half-filled.
    """

    def __init__(self, store: ConversationStore):
        self.store = store

    async def resolve(
        self,
        caller_id: str,
        goal: str,
        conversation_id: Optional[str] = None,
        initial_messages: Sequence[NewMessage] = ()
    ) -> ResolvedSession:
        if conversation_id:
            conversation_id = validate_conversation_id(conversation_id)
            conversation = await self.store.get_conversation(conversation_id, caller_id)
            return ResolvedSession(conversation=conversation, created=False)

        conversation = await self.store.create_conversation(caller_id, goal, initial_messages)
        logger.info(f"Started conversation {conversation.id} for user {caller_id}")
        return ResolvedSession(conversation=conversation, created=True)
