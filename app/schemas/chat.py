"""Chat schemas"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime

from app.exceptions import ValidationException
from app.utils.validators import (
    MESSAGE_MAX_LENGTH,
    validate_conversation_id,
    validate_goal,
    validate_message_content
)


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ChatRequest(CamelModel):
    """Chat turn request schema"""
    message: str = Field(..., max_length=MESSAGE_MAX_LENGTH * 2)
    goal: str
    conversation_id: Optional[str] = None
    tone: Optional[str] = Field(None, max_length=50)
    language: Optional[str] = Field(None, max_length=50)
    ai_provider: Optional[str] = Field(None, max_length=50)

    @field_validator("message")
    @classmethod
    def check_message(cls, value: str) -> str:
        try:
            return validate_message_content(value)
        except ValidationException as e:
            raise ValueError(e.details[0]["msg"])

    @field_validator("goal")
    @classmethod
    def check_goal(cls, value: str) -> str:
        try:
            return validate_goal(value)
        except ValidationException as e:
            raise ValueError(e.message)

    @field_validator("conversation_id")
    @classmethod
    def check_conversation_id(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        try:
            return validate_conversation_id(value)
        except ValidationException as e:
            raise ValueError(e.message)


class ChatResponse(CamelModel):
    """Chat turn response schema"""
    response: str
    conversation_id: str
    message_id: str
    timestamp: datetime
    tone: Optional[str] = None
    language: Optional[str] = None
    ai_provider: str


class MessageOut(CamelModel):
    """Stored message schema"""
    id: str
    role: str
    content: str
    timestamp: datetime
    tone: Optional[str] = None
    language: Optional[str] = None


class ConversationOut(CamelModel):
    """Full conversation schema"""
    id: str
    goal: str
    messages: List[MessageOut]
    created_at: datetime
    updated_at: datetime


class ConversationDetailResponse(CamelModel):
    conversation: ConversationOut


class ConversationSummaryOut(CamelModel):
    """Conversation list item schema"""
    id: str
    goal: str
    message_count: int
    last_message: Optional[MessageOut] = None
    created_at: datetime
    updated_at: datetime


class PaginationOut(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class ConversationListResponse(CamelModel):
    """Conversation list response schema"""
    conversations: List[ConversationSummaryOut]
    pagination: PaginationOut


class DeleteConversationResponse(CamelModel):
    message: str = "Conversation deleted successfully"
    conversation_id: str
