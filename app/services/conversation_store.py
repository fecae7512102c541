"""Conversation persistence"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Sequence
import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload
from starlette.concurrency import run_in_threadpool

from app.exceptions import (
    ChatbotException,
    ConversationNotFoundException,
    DatabaseException,
    NotFoundException,
    ValidationException
)
from app.models.conversation import Conversation
from app.models.message import Message
from app.models.user import User
from app.utils.validators import validate_goal, validate_pagination, validate_role

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewMessage:
    """Message about to be appended"""
    role: str
    content: str
    tone: Optional[str] = None
    language: Optional[str] = None


@dataclass(frozen=True)
class MessageRecord:
    id: str
    role: str
    content: str
    timestamp: datetime
    position: int
    tone: Optional[str] = None
    language: Optional[str] = None


@dataclass(frozen=True)
class ConversationRecord:
    """A conversation with its full, ordered message history"""
    id: str
    user_id: str
    goal: str
    created_at: datetime
    updated_at: datetime
    messages: List[MessageRecord] = field(default_factory=list)

    @property
    def message_count(self) -> int:
        return len(self.messages)

    def history(self) -> List[dict]:
        """Chronological ``role``/``content`` pairs for prompting"""
        return [{"role": m.role, "content": m.content} for m in self.messages]


@dataclass(frozen=True)
class ConversationSummary:
    """List item: counts and the last message only, never full history"""
    id: str
    goal: str
    message_count: int
    last_message: Optional[MessageRecord]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ConversationPage:
    items: List[ConversationSummary]
    total: int


def _message_record(message: Message) -> MessageRecord:
    return MessageRecord(
        id=message.id,
        role=message.role,
        content=message.content,
        timestamp=message.created_at,
        position=message.position,
        tone=message.tone,
        language=message.language
    )


def _conversation_record(conversation: Conversation) -> ConversationRecord:
    return ConversationRecord(
        id=conversation.id,
        user_id=conversation.user_id,
        goal=conversation.goal,
        created_at=conversation.created_at,
        updated_at=conversation.updated_at,
        messages=[_message_record(m) for m in conversation.messages]
    )


class ConversationStore(ABC):
    """
    Durable ordered storage of conversations scoped to an owner

    Every lookup is filtered by owner. A conversation owned by somebody
    else is reported exactly like a missing one.
    """

    @abstractmethod
    async def create_conversation(
        self,
        owner_id: str,
        goal: str,
        messages: Sequence[NewMessage] = ()
    ) -> ConversationRecord:
        """Create a conversation seeded with ``messages`` and bump the owner's counter, all or nothing"""

    @abstractmethod
    async def append_messages(
        self,
        conversation_id: str,
        caller_id: str,
        messages: Sequence[NewMessage]
    ) -> ConversationRecord:
        """Append messages in order, all or nothing"""

    async def append_message(
        self,
        conversation_id: str,
        caller_id: str,
        message: NewMessage
    ) -> ConversationRecord:
        return await self.append_messages(conversation_id, caller_id, [message])

    @abstractmethod
    async def get_conversation(self, conversation_id: str, caller_id: str) -> ConversationRecord:
        """Conversation with messages in chronological order"""

    @abstractmethod
    async def list_conversations(self, owner_id: str, page: int, page_size: int) -> ConversationPage:
        """Summaries sorted by last update, newest first"""

    @abstractmethod
    async def delete_conversation(self, conversation_id: str, caller_id: str) -> bool:
        """Hard delete; messages go with it"""

    @abstractmethod
    async def count_messages(self, owner_id: str) -> int:
        """Total number of messages across the owner's conversations"""


class SQLConversationStore(ConversationStore):
    """
    SQLAlchemy backed store

    Blocking ORM work runs in the thread pool, one session and one
    transaction per operation.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    async def _run(self, operation: str, fn: Callable, *args):
        return await run_in_threadpool(self._in_session, operation, fn, *args)

    def _in_session(self, operation: str, fn: Callable, *args):
        db = self.session_factory()
        try:
            return fn(db, *args)
        except ChatbotException:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Conversation store {operation} failed: {str(e)}", exc_info=True)
            raise DatabaseException(f"Conversation store {operation} failed") from e
        finally:
            db.close()

    @staticmethod
    def _owned(db: Session, conversation_id: str, caller_id: str) -> Optional[Conversation]:
        return db.query(Conversation).filter(
            Conversation.id == conversation_id,
            Conversation.user_id == caller_id
        ).first()

    @staticmethod
    def _load(db: Session, conversation_id: str, caller_id: str) -> Optional[Conversation]:
        return db.query(Conversation).options(
            selectinload(Conversation.messages)
        ).filter(
            Conversation.id == conversation_id,
            Conversation.user_id == caller_id
        ).first()

    @staticmethod
    def _checked(messages: Sequence[NewMessage]) -> List[NewMessage]:
        messages = list(messages)
        for message in messages:
            validate_role(message.role)
            if not message.content or not message.content.strip():
                raise ValidationException("Message content must not be empty")
        return messages

    @staticmethod
    def _add_messages(
        db: Session,
        conversation_id: str,
        start_position: int,
        messages: List[NewMessage],
        now: datetime
    ) -> None:
        for offset, message in enumerate(messages):
            db.add(Message(
                conversation_id=conversation_id,
                position=start_position + offset,
                role=message.role,
                content=message.content,
                tone=message.tone,
                language=message.language,
                created_at=now
            ))
        db.flush()

    async def create_conversation(
        self,
        owner_id: str,
        goal: str,
        messages: Sequence[NewMessage] = ()
    ) -> ConversationRecord:
        goal = validate_goal(goal)
        messages = self._checked(messages)
        return await self._run("create", self._create, owner_id, goal, messages)

    def _create(
        self,
        db: Session,
        owner_id: str,
        goal: str,
        messages: List[NewMessage]
    ) -> ConversationRecord:
        # Counter bump, insert and seed messages share one transaction
        updated = db.query(User).filter(User.id == owner_id).update(
            {User.conversation_count: User.conversation_count + 1},
            synchronize_session=False
        )
        if not updated:
            raise NotFoundException("User not found")

        now = datetime.utcnow()
        conversation = Conversation(
            user_id=owner_id,
            goal=goal,
            message_count=len(messages),
            created_at=now,
            updated_at=now
        )
        db.add(conversation)
        db.flush()
        conversation_id = conversation.id

        if messages:
            self._add_messages(db, conversation_id, 0, messages, now)
        db.commit()

        logger.info(f"Created conversation {conversation_id} for user {owner_id} (goal: {goal})")

        db.expire_all()
        return _conversation_record(self._load(db, conversation_id, owner_id))

    async def append_messages(
        self,
        conversation_id: str,
        caller_id: str,
        messages: Sequence[NewMessage]
    ) -> ConversationRecord:
        messages = self._checked(messages)
        if not messages:
            raise ValidationException("Nothing to append")

        return await self._run("append", self._append, conversation_id, caller_id, messages)

    def _append(
        self,
        db: Session,
        conversation_id: str,
        caller_id: str,
        messages: List[NewMessage]
    ) -> ConversationRecord:
        conversation = self._owned(db, conversation_id, caller_id)
        if conversation is None:
            raise ConversationNotFoundException()

        last_position = db.query(func.max(Message.position)).filter(
            Message.conversation_id == conversation_id
        ).scalar()
        next_position = 0 if last_position is None else last_position + 1

        now = datetime.utcnow()
        self._add_messages(db, conversation_id, next_position, messages, now)

        conversation.message_count = next_position + len(messages)
        conversation.updated_at = now
        db.commit()

        logger.info(f"Appended {len(messages)} message(s) to conversation {conversation_id}")

        db.expire_all()
        return _conversation_record(self._load(db, conversation_id, caller_id))

    async def get_conversation(self, conversation_id: str, caller_id: str) -> ConversationRecord:
        return await self._run("get", self._get, conversation_id, caller_id)

    def _get(self, db: Session, conversation_id: str, caller_id: str) -> ConversationRecord:
        conversation = self._load(db, conversation_id, caller_id)
        if conversation is None:
            raise ConversationNotFoundException()
        return _conversation_record(conversation)

    async def list_conversations(self, owner_id: str, page: int, page_size: int) -> ConversationPage:
        validate_pagination(page, page_size)
        return await self._run("list", self._list, owner_id, page, page_size)

    def _list(self, db: Session, owner_id: str, page: int, page_size: int) -> ConversationPage:
        query = db.query(Conversation).filter(Conversation.user_id == owner_id)
        total = query.count()

        conversations = query.order_by(
            Conversation.updated_at.desc(),
            Conversation.created_at.desc(),
            Conversation.id.desc()
        ).offset((page - 1) * page_size).limit(page_size).all()

        # Only the last message of each conversation on the page
        last_messages = {}
        ids = [c.id for c in conversations]
        if ids:
            latest = db.query(
                Message.conversation_id,
                func.max(Message.position).label("position")
            ).filter(Message.conversation_id.in_(ids)).group_by(Message.conversation_id).subquery()

            rows = db.query(Message).join(
                latest,
                (Message.conversation_id == latest.c.conversation_id)
                & (Message.position == latest.c.position)
            ).all()
            last_messages = {m.conversation_id: _message_record(m) for m in rows}

        items = [
            ConversationSummary(
                id=c.id,
                goal=c.goal,
                message_count=c.message_count,
                last_message=last_messages.get(c.id),
                created_at=c.created_at,
                updated_at=c.updated_at
            )
            for c in conversations
        ]
        return ConversationPage(items=items, total=total)

    async def delete_conversation(self, conversation_id: str, caller_id: str) -> bool:
        return await self._run("delete", self._delete, conversation_id, caller_id)

    def _delete(self, db: Session, conversation_id: str, caller_id: str) -> bool:
        conversation = self._owned(db, conversation_id, caller_id)
        if conversation is None:
            raise ConversationNotFoundException()

        db.query(Message).filter(Message.conversation_id == conversation_id).delete(
            synchronize_session=False
        )
        db.delete(conversation)
        db.commit()

        logger.info(f"Deleted conversation {conversation_id} of user {caller_id}")
        return True

    async def count_messages(self, owner_id: str) -> int:
        return await self._run("count", self._count_messages, owner_id)

    def _count_messages(self, db: Session, owner_id: str) -> int:
        total = db.query(func.coalesce(func.sum(Conversation.message_count), 0)).filter(
            Conversation.user_id == owner_id
        ).scalar()
        return int(total or 0)
