"""Chat API endpoints"""

from fastapi import APIRouter, Depends, Query
from typing import Optional
import logging

from app.api.dependencies import get_chat_service
from app.models.user import User
from app.schemas.chat import (
    ChatRequest,
    ChatResponse,
    ConversationDetailResponse,
    ConversationListResponse,
    DeleteConversationResponse
)
from app.security.auth import get_current_user
from app.services.chat_service import ChatService, ChatTurnRequest
from app.utils.validators import parse_query_int

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/chat", response_model=ChatResponse)
async def send_message(
    request: ChatRequest,
    current_user: User = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service)
):
    """
    Send a message and get the assistant's reply

    Starts a new conversation when no conversationId is given.
    """
    result = await chat_service.send_message(
        current_user.id,
        ChatTurnRequest(
            message=request.message,
            goal=request.goal,
            conversation_id=request.conversation_id,
            tone=request.tone,
            language=request.language,
            ai_provider=request.ai_provider
        ),
        default_provider=current_user.default_ai_provider
    )

    return ChatResponse(
        response=result.response,
        conversation_id=result.conversation_id,
        message_id=result.message_id,
        timestamp=result.timestamp,
        tone=result.tone,
        language=result.language,
        ai_provider=result.ai_provider
    )


@router.get("/chat", response_model=ConversationListResponse)
async def list_conversations(
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    limit: Optional[str] = Query(None, description="Conversations per page, at most 50"),
    current_user: User = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service)
):
    """
    Get the user's conversations, most recently updated first

    Unparseable page or limit values fall back to 1 and 10.
    """
    return await chat_service.list_conversations(
        current_user.id,
        parse_query_int(page, 1),
        parse_query_int(limit, 10)
    )


@router.get("/chat/{conversation_id}", response_model=ConversationDetailResponse)
async def get_conversation(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service)
):
    """
    Get a conversation with its full message history
    """
    return await chat_service.get_conversation(current_user.id, conversation_id)


@router.delete("/chat/{conversation_id}", response_model=DeleteConversationResponse)
async def delete_conversation(
    conversation_id: str,
    current_user: User = Depends(get_current_user),
    chat_service: ChatService = Depends(get_chat_service)
):
    """
    Delete a conversation and all of its messages
    """
    deleted_id = await chat_service.delete_conversation(current_user.id, conversation_id)
    return DeleteConversationResponse(conversation_id=deleted_id)
