"""PostgreSQL message store backed by an asyncpg pool."""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple
from uuid import UUID

import asyncpg

from ..errors.problem_details import NotFoundError, UnavailableError
from ..models.conversations import Conversation, ConversationCreate
from ..models.messages import Message, MessageCreate, MessageRow
from .connection import get_db_pool, db_manager
from .store import BoundaryOp, Direction


logger = logging.getLogger(__name__)

# Failures that mean the store could not be reached or did not answer
STORE_FAILURES = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

MESSAGE_COLUMNS = "sequence_id, conversation_id, body, created_at"


def _row_to_message(row: Any) -> Message:
    """Convert a messages row, parsing the JSONB body when it arrives as text."""
    row_dict = dict(row)
    if row_dict.get("body") and isinstance(row_dict["body"], str):
        row_dict["body"] = json.loads(row_dict["body"])
    return MessageRow.model_validate(row_dict).to_message()


class PostgresSnapshot:
    """Reads bound to one connection inside a read-only REPEATABLE READ transaction."""

    def __init__(self, conn: asyncpg.Connection, conversation_id: UUID):
        self._conn = conn
        self._conversation_id = conversation_id

    def _where(self, boundary_op: Optional[BoundaryOp], boundary_value: Optional[int]) -> Tuple[str, List[Any]]:
        conditions = ["conversation_id = $1"]
        params: List[Any] = [self._conversation_id]
        if boundary_op is not None:
            params.append(boundary_value)
            # Operator comes from the BoundaryOp enum, never from caller text
            conditions.append(f"sequence_id {BoundaryOp(boundary_op).value} ${len(params)}")
        return " AND ".join(conditions), params

    async def fetch_ordered(
        self,
        boundary_op: Optional[BoundaryOp],
        boundary_value: Optional[int],
        limit: int,
        direction: Direction
    ) -> List[Message]:
        where_clause, params = self._where(boundary_op, boundary_value)
        order = "DESC" if Direction(direction) is Direction.DESC else "ASC"
        query = f"""
            SELECT {MESSAGE_COLUMNS}
            FROM messages
            WHERE {where_clause}
            ORDER BY sequence_id {order}
            LIMIT ${len(params) + 1}
        """
        rows = await self._conn.fetch(query, *params, limit)
        return [_row_to_message(row) for row in rows]

    async def exists_beyond(self, boundary_op: BoundaryOp, boundary_value: int) -> bool:
        where_clause, params = self._where(boundary_op, boundary_value)
        query = f"SELECT EXISTS (SELECT 1 FROM messages WHERE {where_clause} LIMIT 1)"
        return bool(await self._conn.fetchval(query, *params))


class PostgresMessageStore:
    """Message store persisting to PostgreSQL.

    Sequence ids come from the ``messages.sequence_id`` identity column, so
    they increase strictly in commit order and are never reused.
    """

    @asynccontextmanager
    async def snapshot(self, conversation_id: UUID) -> AsyncIterator[PostgresSnapshot]:
        """Open a read-only REPEATABLE READ transaction for one conversation.

        Every read made through the yielded snapshot sees the same committed
        state, so a message inserted mid-resolution is invisible to all of them.

        Raises:
            NotFoundError: If the conversation does not exist
            UnavailableError: If the database cannot be reached or fails
        """
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                async with conn.transaction(isolation="repeatable_read", readonly=True):
                    exists = await conn.fetchval(
                        "SELECT EXISTS (SELECT 1 FROM conversations WHERE id = $1)",
                        conversation_id
                    )
                    if not exists:
                        raise NotFoundError(f"Conversation '{conversation_id}' not found")
                    yield PostgresSnapshot(conn, conversation_id)
        except STORE_FAILURES as e:
            logger.error(f"Database error reading conversation {conversation_id}: {e}")
            raise UnavailableError(f"Database error: {e}") from e

    async def create_conversation(self, data: ConversationCreate) -> Conversation:
        """Create a new conversation.

        Raises:
            UnavailableError: If database operation fails
        """
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    """
                    INSERT INTO conversations (title)
                    VALUES ($1)
                    RETURNING id, title, created_at
                    """,
                    data.title
                )
        except STORE_FAILURES as e:
            logger.error(f"Database error creating conversation: {e}")
            raise UnavailableError(f"Database error: {e}") from e

        conversation = Conversation.model_validate(dict(row))
        logger.info(f"Created conversation {conversation.id}")
        return conversation

    async def get_conversation(self, conversation_id: UUID) -> Conversation:
        """Get a conversation by id.

        Raises:
            NotFoundError: If the conversation does not exist
            UnavailableError: If database operation fails
        """
        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT id, title, created_at FROM conversations WHERE id = $1",
                    conversation_id
                )
        except STORE_FAILURES as e:
            logger.error(f"Database error retrieving conversation: {e}")
            raise UnavailableError(f"Database error: {e}") from e

        if not row:
            raise NotFoundError(f"Conversation '{conversation_id}' not found")
        return Conversation.model_validate(dict(row))

    async def create_message(self, conversation_id: UUID, data: MessageCreate) -> Message:
        """Insert a message, letting the identity column assign its sequence id.

        Raises:
            NotFoundError: If the conversation does not exist
            UnavailableError: If database operation fails
        """
        body: Dict[str, Any] = data.body

        try:
            pool = await get_db_pool()
            async with pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO messages (conversation_id, body)
                    VALUES ($1, $2)
                    RETURNING {MESSAGE_COLUMNS}
                    """,
                    conversation_id,
                    json.dumps(body)
                )
        except asyncpg.ForeignKeyViolationError as e:
            logger.warning(f"Message sent to unknown conversation {conversation_id}: {e}")
            raise NotFoundError(f"Conversation '{conversation_id}' not found")
        except STORE_FAILURES as e:
            logger.error(f"Database error creating message: {e}")
            raise UnavailableError(f"Database error: {e}") from e

        message = _row_to_message(row)
        logger.info(f"Created message {message.sequence_id} in conversation {conversation_id}")
        return message

    async def close(self) -> None:
        """Close the underlying pool."""
        await db_manager.close()
