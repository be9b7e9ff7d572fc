"""Conversations API endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter

from ..dependencies import MessageStoreDep
from ..models.conversations import Conversation, ConversationCreate


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/conversations",
    tags=["Conversations"],
    responses={
        404: {"description": "Not Found"},
        503: {"description": "Service Unavailable"}
    }
)


@router.post(
    "",
    response_model=Conversation,
    status_code=201,
    summary="Open a conversation",
    description="Create a new, empty conversation."
)
async def create_conversation(
    conversation_data: ConversationCreate,
    store: MessageStoreDep
) -> Conversation:
    """Create a new conversation."""
    conversation = await store.create_conversation(conversation_data)
    logger.info(f"Opened conversation {conversation.id}")
    return conversation


@router.get(
    "/{conversation_id}",
    response_model=Conversation,
    summary="Get a conversation",
    responses={200: {"description": "Conversation retrieved successfully"}}
)
async def get_conversation(
    conversation_id: UUID,
    store: MessageStoreDep
) -> Conversation:
    return await store.get_conversation(conversation_id)
