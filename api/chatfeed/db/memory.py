"""In-process message store used for local development and tests."""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, List, Optional, Tuple
from uuid import UUID, uuid4

from ..errors.problem_details import NotFoundError
from ..models.conversations import Conversation, ConversationCreate
from ..models.messages import Message, MessageCreate
from .store import BoundaryOp, Direction


logger = logging.getLogger(__name__)


class InMemorySnapshot:
    """Frozen copy of one conversation's messages, oldest first."""

    def __init__(self, messages: Tuple[Message, ...]):
        self._messages = messages

    async def fetch_ordered(
        self,
        boundary_op: Optional[BoundaryOp],
        boundary_value: Optional[int],
        limit: int,
        direction: Direction
    ) -> List[Message]:
        ordered = self._messages if direction is Direction.ASC else tuple(reversed(self._messages))
        if boundary_op is not None:
            ordered = tuple(m for m in ordered if boundary_op.holds(m.sequence_id, boundary_value))
        return list(ordered[:limit])

    async def exists_beyond(self, boundary_op: BoundaryOp, boundary_value: int) -> bool:
        return any(boundary_op.holds(m.sequence_id, boundary_value) for m in self._messages)


class InMemoryMessageStore:
    """Append-only message store held in process memory.

    A single counter hands out sequence ids across all conversations, which
    mirrors the identity column of the PostgreSQL schema.
    """

    def __init__(self):
        self._conversations: Dict[UUID, Conversation] = {}
        self._messages: Dict[UUID, List[Message]] = {}
        self._last_sequence_id = 0
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def snapshot(self, conversation_id: UUID) -> AsyncIterator[InMemorySnapshot]:
        async with self._lock:
            if conversation_id not in self._conversations:
                raise NotFoundError(f"Conversation '{conversation_id}' not found")
            frozen = tuple(self._messages[conversation_id])
        yield InMemorySnapshot(frozen)

    async def create_conversation(self, data: ConversationCreate) -> Conversation:
        conversation = Conversation(
            id=uuid4(),
            title=data.title,
            created_at=datetime.now(timezone.utc)
        )
        async with self._lock:
            self._conversations[conversation.id] = conversation
            self._messages[conversation.id] = []
        logger.info(f"Created conversation {conversation.id}")
        return conversation

    async def get_conversation(self, conversation_id: UUID) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise NotFoundError(f"Conversation '{conversation_id}' not found")
        return conversation

    async def create_message(self, conversation_id: UUID, data: MessageCreate) -> Message:
        async with self._lock:
            if conversation_id not in self._conversations:
                raise NotFoundError(f"Conversation '{conversation_id}' not found")
            self._last_sequence_id += 1
            message = Message(
                sequence_id=self._last_sequence_id,
                conversation_id=conversation_id,
                body=data.body,
                created_at=datetime.now(timezone.utc)
            )
            self._messages[conversation_id].append(message)
        logger.info(f"Created message {message.sequence_id} in conversation {conversation_id}")
        return message

    async def close(self) -> None:
        """Nothing to release."""
