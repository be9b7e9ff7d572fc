"""Messages API endpoints: the paginated feed and message creation."""

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Query

from ..dependencies import MessageStoreDep, SettingsDep
from ..models.connection import Connection
from ..models.messages import Message, MessageCreate
from ..pagination import WindowSpec, assemble_connection, resolve_window


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/conversations/{conversation_id}/messages",
    tags=["Messages"],
    responses={
        404: {"description": "Conversation not found"},
        503: {"description": "Message store unavailable"}
    }
)


@router.get(
    "",
    response_model=Connection,
    summary="Page through messages",
    description="Relay-style cursor connection over a conversation's messages, newest first.",
    responses={
        200: {"description": "Window resolved successfully"},
        400: {"description": "Bad Request - Invalid window arguments or cursor"}
    }
)
async def list_messages(
    conversation_id: UUID,
    store: MessageStoreDep,
    settings: SettingsDep,
    first: Annotated[Optional[int], Query(description="Messages to take walking toward older ones")] = None,
    after: Annotated[Optional[str], Query(description="Cursor the forward window starts after")] = None,
    last: Annotated[Optional[int], Query(description="Messages to take walking toward newer ones")] = None,
    before: Annotated[Optional[str], Query(description="Cursor the backward window starts before")] = None
) -> Connection:
    """Resolve one window of a conversation's messages.

    Exactly one of ``first`` (optionally with ``after``) or ``last``
    (optionally with ``before``) must be supplied. Cursors are opaque; only
    pass back values taken from a previous response.

    Args:
        conversation_id: Conversation to page through
        store: Message store dependency
        settings: Application settings (for the maximum page size)
        first: Forward window size
        after: Forward window cursor
        last: Backward window size
        before: Backward window cursor

    Returns:
        Connection with edges and page info
    """
    spec = WindowSpec.from_arguments(
        first=first,
        after=after,
        last=last,
        before=before,
        max_page_size=settings.max_page_size
    )

    result = await resolve_window(store, conversation_id, spec)
    connection = assemble_connection(result.items, result.has_previous_page, result.has_next_page)

    logger.info(
        f"Returned {len(connection.edges)} messages from conversation {conversation_id} "
        f"({spec.mode.value}, count={spec.count})"
    )
    return connection


@router.post(
    "",
    response_model=Message,
    status_code=201,
    summary="Send a message",
    description="Append a message to a conversation; the store assigns its sequence id."
)
async def create_message(
    conversation_id: UUID,
    message_data: MessageCreate,
    store: MessageStoreDep
) -> Message:
    return await store.create_message(conversation_id, message_data)
